#!/usr/bin/env python
import logging
from pathlib import Path
from typing import List, Optional


class FS:
    """
    Manages the project's folder layout: logs plus input and output sound folders.
    """
    def __init__(self, root: Optional[Path] = None) -> None:
        self.root: Path = Path(root) if root is not None else self.get_project_root()
        self.data_folder: Path = self.root / "data"
        self.logs_folder: Path = self.data_folder / "logs"
        self.sound_folder: Path = self.data_folder / "sound"
        self.sound_input_folder: Path = self.sound_folder / "input"
        self.sound_output_folder: Path = self.sound_folder / "output"
        self.create_directories()

    def get_project_root(self) -> Path:
        """
        Determines the project root directory.

        Returns:
            Path object pointing to the project root
        """
        # Assumes this file is inside the "src" directory; project root is its parent.
        return Path(__file__).resolve().parent.parent

    def create_directories(self) -> None:
        """
        Creates all necessary directories for the application if they don't exist.
        """
        for folder in [
            self.data_folder,
            self.logs_folder,
            self.sound_folder,
            self.sound_input_folder,
            self.sound_output_folder,
        ]:
            folder.mkdir(parents=True, exist_ok=True)
            logging.debug(f"Ensured directory exists: {folder}")

    def resolve_input(self, audio_file: str) -> Path:
        """
        Resolve an audio file name against the input folder. Absolute paths
        and paths that already exist are returned unchanged.
        """
        path = Path(audio_file)
        if path.is_absolute() or path.exists():
            return path
        return self.sound_input_folder / audio_file

    def get_sound_input_files(self, extension: str = "wav") -> List[Path]:
        """
        Lists all files with the given extension in the input folder.

        Args:
            extension: File extension to filter by (without the dot)

        Returns:
            List of Path objects for files with the given extension
        """
        return sorted(self.sound_input_folder.glob(f"*.{extension}"))
