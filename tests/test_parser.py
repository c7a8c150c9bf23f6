import pytest

from inicache import (
    FileStorage,
    IniCache,
    IniCacheParser,
    IniYamlParser,
    InsertionType,
    InvalidParameter,
    MemoryStorage,
    StorageError,
    load,
    load_by_handle,
    save,
    save_by_handle,
)


@pytest.fixture
def built_cache():
    cache = IniCache()
    version = cache.add_section("Version")
    version.add_key("Signature", "$ReactOS$")
    files = cache.add_section("Files")
    files.add_key("kernel32.dll", "1")
    files.add_key("ntoskrnl.exe", "1")
    files.insert_key(files.find_key("ntoskrnl.exe"), InsertionType.BEFORE, "hal.dll", "1")
    cache.add_section("Empty")
    return cache


def test_round_trip_through_file(tmp_path, built_cache):
    path = str(tmp_path / "txtsetup.sif")
    save(built_cache, path)
    loaded = load(path)
    assert list(loaded) == ["Version", "Files", "Empty"]
    assert list(loaded["Files"].items()) == [
        ("kernel32.dll", "1"),
        ("hal.dll", "1"),
        ("ntoskrnl.exe", "1"),
    ]
    assert loaded.to_dict() == built_cache.to_dict()


def test_saved_bytes_are_canonical(tmp_path, built_cache):
    path = tmp_path / "out.ini"
    save(built_cache, str(path))
    assert path.read_bytes() == (
        b"[Version]\r\nSignature=$ReactOS$\r\n\r\n"
        b"[Files]\r\nkernel32.dll=1\r\nhal.dll=1\r\nntoskrnl.exe=1\r\n\r\n"
        b"[Empty]\r\n"
    )


def test_save_replaces_existing_content(tmp_path):
    path = tmp_path / "out.ini"
    path.write_text("[Old]\nStuff=" + "x" * 200 + "\n")
    cache = IniCache()
    cache.add_section("New").add_key("K", "V")
    save(cache, str(path))
    assert path.read_bytes() == b"[New]\r\nK=V\r\n"


def test_load_string_mode(tmp_path):
    path = tmp_path / "txtsetup.sif"
    path.write_bytes(b'[Version]\r\nSignature = "$ReactOS$"\r\n')
    assert load(str(path), string_mode=True)["Version"]["Signature"] == "$ReactOS$"
    assert load(str(path))["Version"]["Signature"] == '"$ReactOS$"'


def test_load_missing_file(tmp_path):
    with pytest.raises(StorageError):
        load(str(tmp_path / "nope.ini"))


def test_parser_keeps_detected_codec(tmp_path):
    path = tmp_path / "latin.ini"
    path.write_bytes("[Pfade]\r\nZiel=C:\\Straße\r\n".encode("cp1252"))
    parser = IniCacheParser(str(path), "cp1252")
    cache = parser.read()
    assert cache["pfade"]["ziel"] == "C:\\Straße"
    cache["Pfade"]["Quelle"] = "D:\\Größe"
    parser.write(cache)
    assert path.read_bytes().decode("cp1252").endswith("Quelle=D:\\Größe\r\n")


def test_memory_storage_orchestration(built_cache):
    storage = MemoryStorage()
    save(built_cache, "setup.inf", storage=storage)
    assert storage.blobs["setup.inf"].startswith(b"[Version]\r\n")
    loaded = load("setup.inf", storage=storage)
    assert loaded.to_dict() == built_cache.to_dict()


class _FailingWrites(MemoryStorage):
    def __init__(self):
        super().__init__()
        self.closed = 0

    def write_all(self, handle, data):
        raise StorageError("disk full")

    def close(self, handle):
        self.closed += 1
        super().close(handle)


def test_handle_closed_when_write_fails(built_cache):
    storage = _FailingWrites()
    with pytest.raises(StorageError):
        save(built_cache, "setup.inf", storage=storage)
    assert storage.closed == 1


def test_write_rejects_non_cache(tmp_path):
    with pytest.raises(InvalidParameter):
        IniCacheParser(str(tmp_path / "x.ini")).write({"S": {"K": "V"}})


def test_parser_str():
    parser = IniCacheParser("setup.ini", "ascii", string_mode=True)
    assert str(parser) == "INI cache: setup.ini(ascii)"
    assert parser.string_mode


def test_yaml_export_round_trip(tmp_path, built_cache):
    built_cache["Version"]["Count"] = "007"
    built_cache["Version"]["Enabled"] = "yes"
    path = str(tmp_path / "txtsetup.yaml")
    IniYamlParser(path).write(built_cache)
    loaded = IniYamlParser(path).read()
    assert loaded.to_dict() == built_cache.to_dict()
    assert list(loaded) == ["Version", "Files", "Empty"]


def test_yaml_read_converts_scalars(tmp_path):
    path = tmp_path / "plain.yaml"
    path.write_text("Section:\n  Number: 1\n  Flag: true\n  Nothing:\n", encoding="utf-8")
    loaded = IniYamlParser(str(path)).read()
    assert loaded.to_dict() == {"Section": {"Number": "1", "Flag": "True"}}


def test_ascii_file_accepts_non_ascii_on_save(tmp_path):
    path = tmp_path / "plain.ini"
    path.write_bytes(b"[Paths]\r\nRoot=C:\\\r\n")
    parser = IniCacheParser(str(path))
    cache = parser.read()
    cache["Paths"]["Home"] = "C:\\Jürgen"
    parser.write(cache)
    assert path.read_bytes().decode("utf-8") == "[Paths]\r\nRoot=C:\\\r\nHome=C:\\Jürgen\r\n"


@pytest.mark.parametrize("encoding", [None, "utf-8"])
def test_bom_does_not_hide_first_section(tmp_path, encoding):
    path = tmp_path / "bom.inf"
    path.write_bytes(b"\xef\xbb\xbf[Version]\r\nSignature=x\r\n[B]\r\nK=V\r\n")
    cache = load(str(path), encoding=encoding)
    assert cache.to_dict() == {"Version": {"Signature": "x"}, "B": {"K": "V"}}


def test_load_and_save_by_memory_handle(built_cache):
    storage = MemoryStorage()
    handle = storage.open_for_write("setup.inf")
    save_by_handle(built_cache, handle, storage=storage)
    # still open, so the blob is not published yet.
    storage.write_all(handle, b"\r\n[Tail]\r\nK=V\r\n")
    storage.close(handle)

    handle = storage.open_for_read("setup.inf")
    loaded = load_by_handle(handle, storage=storage)
    assert not handle.buf.closed
    storage.close(handle)
    assert list(loaded) == ["Version", "Files", "Empty", "Tail"]


def test_load_and_save_by_file_handle(tmp_path, built_cache):
    path = str(tmp_path / "setup.inf")
    storage = FileStorage()
    handle = storage.open_for_write(path)
    try:
        save_by_handle(built_cache, handle)
        assert not handle.closed
    finally:
        storage.close(handle)

    handle = storage.open_for_read(path)
    try:
        loaded = load_by_handle(handle, encoding="utf-8")
        assert not handle.closed
    finally:
        storage.close(handle)
    assert loaded.to_dict() == built_cache.to_dict()


def test_name_based_calls_share_the_handle_path(built_cache):
    seen = []

    class Recording(IniCacheParser):
        def read_handle(self, handle):
            seen.append(handle.name)
            return super().read_handle(handle)

    storage = MemoryStorage()
    save(built_cache, "by-name.inf", storage=storage)
    handle = storage.open_for_write("by-handle.inf")
    save_by_handle(built_cache, handle, storage=storage)
    storage.close(handle)
    assert storage.blobs["by-name.inf"] == storage.blobs["by-handle.inf"]

    assert Recording("by-name.inf", storage=storage).read().to_dict() == built_cache.to_dict()
    assert seen == ["by-name.inf"]


def test_unencodable_cache_leaves_file_alone(tmp_path):
    path = tmp_path / "plain.ini"
    path.write_bytes(b"[S]\r\nK=V\r\n")
    cache = IniCache()
    cache.add_section("S").add_key("K", "Größe")
    with pytest.raises(InvalidParameter):
        IniCacheParser(str(path), "ascii").write(cache)
    assert path.read_bytes() == b"[S]\r\nK=V\r\n"
