import base64
import json
from pathlib import Path
from typing import Dict

import pytest

from bundler import BuildError, FormatError, ParseError, BundleIOError, package, unpack
from bundler.models import BuildDescriptor


def _tree_snapshot(root: Path) -> Dict[str, object]:
    """Return {relative_posix_path: content} for everything under root.

    JSON files are compared by parsed content, directories as None.
    """
    out: Dict[str, object] = {}
    for p in root.rglob("*"):
        rel = p.relative_to(root).as_posix()
        if p.is_dir():
            out[rel] = None
        elif p.name.endswith(".json"):
            out[rel] = json.loads(p.read_text(encoding="utf-8"))
        else:
            out[rel] = p.read_bytes()
    return out


def _make_project(root: Path) -> None:
    (root / "zomes" / "chat" / "src").mkdir(parents=True)
    (root / "ui" / "assets").mkdir(parents=True)
    (root / "empty").mkdir()

    (root / "dna.json").write_text(json.dumps({"name": "chat", "version": 3, "tags": ["a", "b"]}), encoding="utf-8")
    (root / "README.md").write_text("Chat app\n", encoding="utf-8")
    (root / "blob.bin").write_bytes(bytes(range(256)) * 4)
    (root / "zomes" / "chat" / "zome.json").write_text('{"description": "chat zome"}', encoding="utf-8")
    (root / "zomes" / "chat" / "src" / "lib.rs").write_text("pub fn hello() {}\n", encoding="utf-8")
    (root / "ui" / "index.html").write_text("<html></html>", encoding="utf-8")
    (root / "ui" / "assets" / "logo.svg").write_text("<svg/>", encoding="utf-8")


def _read_bundle(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


def test_pack_unpack_reproduces_tree(tmp_path: Path) -> None:
    src, dst = tmp_path / "src", tmp_path / "dst"
    src.mkdir()
    _make_project(src)
    bundle_path = tmp_path / "bundle.json"

    package(src, bundle_path)
    written = unpack(bundle_path, dst)

    assert written == 7
    assert _tree_snapshot(dst) == _tree_snapshot(src)


def test_bundle_layout(tmp_path: Path) -> None:
    src = tmp_path / "src"
    (src / "sub").mkdir(parents=True)
    (src / "app.json").write_text('{"name": "demo"}', encoding="utf-8")
    (src / "a.txt").write_bytes(b"hello")
    (src / "sub" / "b.txt").write_bytes(b"\x00\xff")

    bundle = _read_bundle(package(src, tmp_path / "out.json"))

    assert bundle == {
        "name": "demo",
        "a.txt": base64.b64encode(b"hello").decode(),
        "sub": {
            "b.txt": base64.b64encode(b"\x00\xff").decode(),
            "__META__": {"tree": {"b.txt": "file"}},
        },
        "__META__": {"tree": {"a.txt": "file", "sub": "dir"}, "config_file": "app.json"},
    }


def test_packing_twice_is_byte_identical(tmp_path: Path) -> None:
    src = tmp_path / "src"
    src.mkdir()
    _make_project(src)

    first = package(src, tmp_path / "first.json")
    second = package(src, tmp_path / "second.json")

    assert first.read_bytes() == second.read_bytes()


def test_bundle_inside_project_is_not_packed_again(tmp_path: Path, monkeypatch) -> None:
    src = tmp_path / "src"
    src.mkdir()
    _make_project(src)
    monkeypatch.chdir(src)

    first = package().read_bytes()
    second = package().read_bytes()

    assert (src / "bundle.json").is_file()
    assert first == second


def test_stripped_bundle_unpacks_to_nothing(tmp_path: Path) -> None:
    src, dst = tmp_path / "src", tmp_path / "dst"
    src.mkdir()
    _make_project(src)

    bundle_path = package(src, tmp_path / "bundle.json", strip_meta=True)

    assert "__META__" not in bundle_path.read_text(encoding="utf-8")
    assert unpack(bundle_path, dst) == 0
    assert list(dst.iterdir()) == []


def test_config_file_is_hoisted_and_restored(tmp_path: Path) -> None:
    src, dst = tmp_path / "src", tmp_path / "dst"
    src.mkdir()
    (src / "dna.json").write_text('{"a":1}', encoding="utf-8")

    bundle_path = package(src, tmp_path / "bundle.json")

    assert _read_bundle(bundle_path) == {"a": 1, "__META__": {"config_file": "dna.json"}}
    unpack(bundle_path, dst)
    assert [p.name for p in dst.iterdir()] == ["dna.json"]
    assert json.loads((dst / "dna.json").read_text(encoding="utf-8")) == {"a": 1}


def test_empty_config_file_is_not_restored(tmp_path: Path) -> None:
    src, dst = tmp_path / "src", tmp_path / "dst"
    src.mkdir()
    (src / "dna.json").write_text("{}", encoding="utf-8")
    (src / "a.txt").write_text("x", encoding="utf-8")

    unpack(package(src, tmp_path / "bundle.json"), dst)

    assert [p.name for p in dst.iterdir()] == ["a.txt"]


def _make_buildable(root: Path, artifact: bytes) -> Path:
    zome = root / "zome"
    (zome / "src").mkdir(parents=True)
    (zome / "src" / "lib.rs").write_text("fn main() {}", encoding="utf-8")
    (zome / "Cargo.toml").write_text("[package]", encoding="utf-8")
    (zome / "out.bin").write_bytes(artifact)
    BuildDescriptor.with_artifact("out.bin").cmd("true", []).save_as(zome / ".build")
    return zome


def test_build_artifact_replaces_sources(tmp_path: Path, recording_executor) -> None:
    src, dst = tmp_path / "src", tmp_path / "dst"
    src.mkdir()
    artifact = b"\x00asm\x01\x00\x00\x00"
    zome = _make_buildable(src, artifact)
    executor = recording_executor()

    bundle_path = package(src, tmp_path / "bundle.json", executor=executor)
    bundle = _read_bundle(bundle_path)

    assert executor.calls == [("true", [], zome)]
    assert bundle["zome"] == {"code": base64.b64encode(artifact).decode()}
    assert bundle["__META__"] == {"tree": {"zome": "bin"}}

    unpack(bundle_path, dst)
    assert [p.name for p in dst.iterdir()] == ["zome.wasm"]
    assert (dst / "zome.wasm").read_bytes() == artifact


def test_build_failure_writes_no_bundle(tmp_path: Path, recording_executor) -> None:
    src = tmp_path / "src"
    src.mkdir()
    (src / "a.txt").write_text("x", encoding="utf-8")
    _make_buildable(src, b"x")
    bundle_path = tmp_path / "bundle.json"

    with pytest.raises(BuildError):
        package(src, bundle_path, executor=recording_executor(status=1))

    assert not bundle_path.exists()


def test_parse_error_anywhere_aborts_pack(tmp_path: Path) -> None:
    src = tmp_path / "src"
    (src / "deep" / "deeper").mkdir(parents=True)
    (src / "deep" / "deeper" / "bad.json").write_text("[]", encoding="utf-8")
    bundle_path = tmp_path / "bundle.json"

    with pytest.raises(ParseError):
        package(src, bundle_path)

    assert not bundle_path.exists()


def _write_bundle(tmp_path: Path, content) -> Path:
    path = tmp_path / "bundle.json"
    path.write_text(json.dumps(content), encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content",
    [
        {"x": "abc", "__META__": {"tree": {"x": "dir"}}},
        {"x": {"a": 1}, "__META__": {"tree": {"x": "file"}}},
        {"x": "abc", "__META__": {"tree": {"x": "bin"}}},
        {"x": {"data": "AA=="}, "__META__": {"tree": {"x": "bin"}}},
        {"__META__": {"tree": {"x": "file"}}},
        {"x": "AA==", "__META__": {"tree": {"x": "socket"}}},
        {"x": "AA==", "__META__": ["x"]},
        {"__META__": {"config_file": 42}},
        {"x": "not base64!", "__META__": {"tree": {"x": "file"}}},
        {"..": "AA==", "__META__": {"tree": {"..": "file"}}},
        {"a/b": "AA==", "__META__": {"tree": {"a/b": "file"}}},
        {"a\u0000": "AA==", "__META__": {"tree": {"a\u0000": "file"}}},
        ["not", "an", "object"],
    ],
)
def test_incompatible_bundles_are_rejected(tmp_path: Path, content) -> None:
    with pytest.raises(FormatError):
        unpack(_write_bundle(tmp_path, content), tmp_path / "dst")


def test_unpack_errors_keep_files_already_written(tmp_path: Path) -> None:
    content = {
        "a.txt": base64.b64encode(b"kept").decode(),
        "z": "abc",
        "__META__": {"tree": {"a.txt": "file", "z": "dir"}},
    }

    with pytest.raises(FormatError):
        unpack(_write_bundle(tmp_path, content), tmp_path / "dst")

    assert (tmp_path / "dst" / "a.txt").read_bytes() == b"kept"


def test_unpack_io_preconditions(tmp_path: Path) -> None:
    with pytest.raises(BundleIOError):
        unpack(tmp_path / "missing.json", tmp_path / "dst")

    bundle_path = _write_bundle(tmp_path, {})
    not_a_dir = tmp_path / "file"
    not_a_dir.write_text("x", encoding="utf-8")
    with pytest.raises(BundleIOError):
        unpack(bundle_path, not_a_dir)


def test_unpack_rejects_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "bundle.json"
    path.write_text("{truncated", encoding="utf-8")

    with pytest.raises(ParseError):
        unpack(path, tmp_path / "dst")


def test_unpack_creates_nested_destination(tmp_path: Path) -> None:
    content = {"a.txt": base64.b64encode(b"x").decode(), "__META__": {"tree": {"a.txt": "file"}}}

    unpack(_write_bundle(tmp_path, content), tmp_path / "out" / "nested")

    assert (tmp_path / "out" / "nested" / "a.txt").read_bytes() == b"x"


def test_unpack_rejects_bundle_that_is_not_utf8(tmp_path: Path) -> None:
    path = tmp_path / "bundle.json"
    path.write_bytes(b"\xff\xfe\x00")

    with pytest.raises(ParseError):
        unpack(path, tmp_path / "dst")


def test_artifact_extension_is_appended_to_dotted_names(tmp_path: Path) -> None:
    artifact = b"\x00asm"
    content = {
        "mod.v1": {"code": base64.b64encode(artifact).decode()},
        "__META__": {"tree": {"mod.v1": "bin"}},
    }

    unpack(_write_bundle(tmp_path, content), tmp_path / "dst")

    assert [p.name for p in (tmp_path / "dst").iterdir()] == ["mod.v1.wasm"]
    assert (tmp_path / "dst" / "mod.v1.wasm").read_bytes() == artifact
