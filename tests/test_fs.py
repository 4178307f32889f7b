from fs import FS


def test_creates_layout(tmp_path):
    fs = FS(root=tmp_path)
    for folder in (fs.data_folder, fs.logs_folder, fs.sound_input_folder, fs.sound_output_folder):
        assert folder.is_dir()
    assert fs.sound_input_folder == tmp_path / "data" / "sound" / "input"


def test_lists_input_files(tmp_path):
    fs = FS(root=tmp_path)
    (fs.sound_input_folder / "b.wav").write_bytes(b"")
    (fs.sound_input_folder / "a.wav").write_bytes(b"")
    (fs.sound_input_folder / "notes.txt").write_text("x")
    assert [p.name for p in fs.get_sound_input_files()] == ["a.wav", "b.wav"]


def test_resolve_input(tmp_path):
    fs = FS(root=tmp_path)
    assert fs.resolve_input("rain.wav") == fs.sound_input_folder / "rain.wav"
    absolute = tmp_path / "elsewhere.wav"
    assert fs.resolve_input(str(absolute)) == absolute
