"""Shared fixtures: in-memory .xmind archives and a local vault."""

import struct
import zipfile
from io import BytesIO

import pytest

from mindmap_outline import LocalStorage

CONTENT_XML = """<?xml version="1.0" encoding="UTF-8" standalone="no"?>
<xmap-content xmlns="urn:xmind:xmap:xmlns:content:2.0" xmlns:xhtml="http://www.w3.org/1999/xhtml" version="2.0">
<sheet id="s1">
<topic id="t0"><title>Root</title>
<children><topics type="attached">
<topic id="t1"><title>Branch</title>
<xhtml:img xhtml:src="xap:resources/pic.png"/>
<children><topics type="attached">
<topic id="t2"><title>Leaf</title><xhtml:img xhtml:src="xap:resources/leaf.jpg"/></topic>
</topics></children>
</topic>
<topic id="t3"><title>Missing</title><xhtml:img xhtml:src="xap:resources/gone.png"/></topic>
</topics></children>
</topic>
</sheet>
</xmap-content>
"""

RESOURCES = {
    "pic.png": b"\x89PNG branch",
    "leaf.jpg": b"\xff\xd8 leaf",
}


def build_xmind(content=CONTENT_XML, resources=None):
    """Zip a content.xml string and resource blobs into .xmind bytes."""
    buf = BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        if content is not None:
            zf.writestr("content.xml", content)
        zf.writestr("resources/", "")
        for name, data in (RESOURCES if resources is None else resources).items():
            zf.writestr(f"resources/{name}", data)
    return buf.getvalue()


@pytest.fixture
def vault(tmp_path):
    return LocalStorage(tmp_path)


@pytest.fixture
def xmind_doc(tmp_path):
    """Write the default archive to maps/plan.xmind and return its id."""
    path = tmp_path / "maps" / "plan.xmind"
    path.parent.mkdir(parents=True)
    path.write_bytes(build_xmind())
    return "maps/plan.xmind"


class FlakyStorage(LocalStorage):
    """LocalStorage that fails on paths containing a marker."""

    def __init__(self, root, fail_write="", fail_delete=""):
        super().__init__(root)
        self.fail_write = fail_write
        self.fail_delete = fail_delete

    def write_binary(self, path, data):
        if self.fail_write and self.fail_write in path:
            raise OSError("disk full")
        super().write_binary(path, data)

    def delete_file(self, path):
        if self.fail_delete and self.fail_delete in path:
            raise OSError("permission denied")
        super().delete_file(path)


@pytest.fixture
def make_xmind():
    return build_xmind


@pytest.fixture
def flaky_storage(tmp_path):
    def factory(fail_write="", fail_delete=""):
        return FlakyStorage(tmp_path, fail_write=fail_write, fail_delete=fail_delete)
    return factory


class MemoryStorage:
    """Storage kept in a dict, for tests that write many assets."""

    def __init__(self):
        self.files = {}
        self.dirs = set()

    def read_text(self, path):
        return self.files[path].decode("utf-8")

    def read_binary(self, path):
        return self.files[path]

    def path_exists(self, path):
        return path in self.files or path in self.dirs

    def create_dir(self, path):
        self.dirs.add(path)

    def write_binary(self, path, data):
        self.files[path] = data

    def delete_file(self, path):
        del self.files[path]


@pytest.fixture
def memory_storage():
    return MemoryStorage()


def damage_entry(data, name):
    """Flip bytes inside the compressed data of one archive entry."""
    with zipfile.ZipFile(BytesIO(data)) as zf:
        offset = zf.getinfo(name).header_offset
    raw = bytearray(data)
    name_len, extra_len = struct.unpack("<HH", raw[offset + 26:offset + 30])
    start = offset + 30 + name_len + extra_len
    for i in range(start + 2, start + 22):
        raw[i] ^= 0xFF
    return bytes(raw)


@pytest.fixture
def damaged_xmind():
    """The default archive with its content.xml data corrupted."""
    return damage_entry(build_xmind(), "content.xml")
