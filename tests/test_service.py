import re
from pathlib import Path

import pytest

from filedrop.shared.errors import InvalidInput, NotFound, StorageFailure
from filedrop.transfers.models import UploadPart
from filedrop.transfers.service import Manifest, SingleFile, TransferService, format_size


@pytest.fixture
def service(registry, store):
    return TransferService(registry, store)


@pytest.mark.parametrize("n,expected", [
    (0, "0 Bytes"),
    (1, "1 Bytes"),
    (1023, "1023 Bytes"),
    (1024, "1 KB"),
    (1152, "1.13 KB"),
    (1536, "1.5 KB"),
    (1664, "1.63 KB"),
    (1048576, "1 MB"),
    (1234567, "1.18 MB"),
    (5368709120, "5 GB"),
    (1024 ** 4, "1024 GB"),
])
def test_format_size(n, expected):
    assert format_size(n) == expected

def test_upload_requires_files(service):
    with pytest.raises(InvalidInput, match="select files"):
        service.handle_upload([])

def test_single_file_downloads_directly(service, make_part):
    res = service.handle_upload([make_part("report.pdf", b"%PDF")])
    assert res.file_count == 1

    out = service.handle_download(res.download_id)
    assert isinstance(out, SingleFile)
    assert out.display_name == "report.pdf"
    assert Path(out.path).read_bytes() == b"%PDF"

def test_many_files_give_manifest_in_upload_order(service, registry, make_part):
    parts = [make_part("c.txt", b"c" * 2048), make_part("a.txt", b"a"), make_part("b.bin", b"")]
    res = service.handle_upload(parts, email="", message="see attached")
    assert res.file_count == 3

    out = service.handle_download(res.download_id)
    assert isinstance(out, Manifest)
    assert [e.display_name for e in out.entries] == ["c.txt", "a.txt", "b.bin"]
    assert [e.size for e in out.entries] == ["2 KB", "1 Bytes", "0 Bytes"]

    rec = registry.resolve(res.download_id)
    assert rec.email is None and rec.message == "see attached"
    for entry, f in zip(out.entries, rec.files):
        assert entry.download_url == f"/download-file/{res.download_id}/{f.stored_name}"

def test_stored_names_keep_extension(service, registry, make_part):
    res = service.handle_upload([make_part("photo.JPG"), make_part("noext")])
    names = [f.stored_name for f in registry.resolve(res.download_id).files]
    assert re.fullmatch(r"\d+-\d+\.JPG", names[0])
    assert re.fullmatch(r"\d+-\d+", names[1])

def test_file_download(service, registry, make_part):
    res = service.handle_upload([make_part("a.txt", b"A"), make_part("b.txt", b"B")])
    stored = registry.resolve(res.download_id).files[1].stored_name

    out = service.handle_file_download(res.download_id, stored)
    assert out.display_name == "b.txt"
    assert Path(out.path).read_bytes() == b"B"
    with pytest.raises(NotFound):
        service.handle_file_download(res.download_id, "missing")

def test_failed_commit_leaves_nothing_behind(service, registry, store, make_part):
    good = make_part("good.txt")
    gone = UploadPart(original_name="gone.txt", temp_path=str(store.tmp_dir / "vanished"), size_bytes=3)
    later = make_part("later.txt")

    with pytest.raises(StorageFailure):
        service.handle_upload([good, gone, later])

    assert len(registry) == 0
    assert list(store.uploads_dir.iterdir()) == []
    assert not Path(later.temp_path).exists()

def test_missing_content_is_storage_failure(service, registry, make_part):
    res = service.handle_upload([make_part()])
    Path(registry.resolve(res.download_id).files[0].storage_path).unlink()
    with pytest.raises(StorageFailure):
        service.handle_download(res.download_id)
