import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from archdemo import templates
from archdemo.manifest import load_manifest, write_demo_manifest
from archdemo.templates import (
    demo_dir_for,
    ensure_demo_project,
    ensure_shared_libraries,
    frontend_env_path,
    materialize,
    template_dir,
)


def _snapshot(root: Path) -> dict[str, bytes]:
    return {
        str(p.relative_to(root)): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


class MaterializeTests(unittest.TestCase):
    def test_copies_tree_preserving_relative_paths(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            src = Path(tmp) / "src"
            (src / "a" / "b").mkdir(parents=True)
            (src / "top.txt").write_text("top")
            (src / "a" / "b" / "leaf.txt").write_text("leaf")
            dest = Path(tmp) / "out" / "dest"
            materialize(src, dest)
            self.assertEqual((dest / "top.txt").read_text(), "top")
            self.assertEqual((dest / "a" / "b" / "leaf.txt").read_text(), "leaf")

    def test_overwrites_existing_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            src = Path(tmp) / "src"
            src.mkdir()
            (src / "f.txt").write_text("new")
            dest = Path(tmp) / "dest"
            dest.mkdir()
            (dest / "f.txt").write_text("old")
            (dest / "extra.txt").write_text("kept")
            materialize(src, dest)
            self.assertEqual((dest / "f.txt").read_text(), "new")
            self.assertEqual((dest / "extra.txt").read_text(), "kept")

    def test_missing_template_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(FileNotFoundError):
                template_dir("nope", Path(tmp))


class SharedLibraryTests(unittest.TestCase):
    def test_bundled_templates_present(self) -> None:
        for name in ("common", "program", "bip322", "app"):
            self.assertTrue(template_dir(name).is_dir(), name)
        self.assertTrue((template_dir("app") / "frontend" / ".env.example").exists())

    def test_setup_twice_is_noop(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            base = Path(tmp)
            self.assertTrue(ensure_shared_libraries(base))
            first = _snapshot(base)
            self.assertIn("common/Cargo.toml", first)
            self.assertIn("program/Cargo.toml", first)
            self.assertIn("bip322/Cargo.toml", first)
            self.assertFalse(ensure_shared_libraries(base))
            self.assertEqual(_snapshot(base), first)

    def test_guard_directory_skips_setup(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            base = Path(tmp)
            (base / "common").mkdir()
            self.assertFalse(ensure_shared_libraries(base))
            self.assertFalse((base / "program").exists())

    def test_guard_directory_is_copied_last(self) -> None:
        copied = []
        real = templates.materialize

        def record(source: Path, dest: Path) -> None:
            copied.append(dest.name)
            real(source, dest)

        with tempfile.TemporaryDirectory() as tmp:
            with patch("archdemo.templates.materialize", side_effect=record):
                ensure_shared_libraries(Path(tmp))
        self.assertEqual(sorted(copied), ["bip322", "common", "program"])
        self.assertEqual(copied[-1], "common")

    def test_interrupted_copy_is_retried(self) -> None:
        real = templates.materialize

        def fail_on_bip322(source: Path, dest: Path) -> None:
            if dest.name == "bip322":
                raise OSError("disk full")
            real(source, dest)

        with tempfile.TemporaryDirectory() as tmp:
            base = Path(tmp)
            with patch("archdemo.templates.materialize", side_effect=fail_on_bip322):
                with self.assertRaisesRegex(OSError, "disk full"):
                    ensure_shared_libraries(base)
            self.assertFalse((base / "common").exists())

            self.assertTrue(ensure_shared_libraries(base))
            for lib in ("common", "program", "bip322"):
                self.assertTrue((base / lib / "Cargo.toml").exists(), lib)


class DemoProjectTests(unittest.TestCase):
    def test_creates_project_and_renames_env_example(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            demo_dir = demo_dir_for(Path(tmp))
            self.assertTrue(ensure_demo_project(demo_dir))
            env_path = frontend_env_path(demo_dir)
            self.assertTrue(env_path.exists())
            self.assertFalse((env_path.parent / ".env.example").exists())
            self.assertIn("VITE_PROGRAM_PUBKEY=", env_path.read_text())
            self.assertTrue((demo_dir / "Cargo.toml").exists())
            self.assertTrue((demo_dir / "app" / "backend").is_dir())

    def test_existing_demo_dir_is_left_alone(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            demo_dir = demo_dir_for(Path(tmp))
            demo_dir.mkdir(parents=True)
            self.assertFalse(ensure_demo_project(demo_dir))
            self.assertEqual(list(demo_dir.iterdir()), [])

    def test_template_without_env_example(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp) / "templates"
            (root / "app" / "frontend").mkdir(parents=True)
            (root / "app" / "frontend" / "index.html").write_text("<html></html>")
            demo_dir = demo_dir_for(Path(tmp) / "base")
            self.assertTrue(ensure_demo_project(demo_dir, templates_root=root))
            self.assertFalse(frontend_env_path(demo_dir).exists())

    def test_failed_setup_leaves_no_demo_dir(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            demo_dir = demo_dir_for(Path(tmp))
            with patch("archdemo.templates.write_demo_manifest", side_effect=OSError("read-only")):
                with self.assertRaisesRegex(OSError, "read-only"):
                    ensure_demo_project(demo_dir)
            self.assertFalse(demo_dir.exists())

            self.assertTrue(ensure_demo_project(demo_dir))
            self.assertTrue(frontend_env_path(demo_dir).exists())
            self.assertTrue((demo_dir / "Cargo.toml").exists())
            self.assertEqual([p.name for p in demo_dir.parent.iterdir()], ["demo"])

    def test_copy_error_propagates(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            demo_dir = demo_dir_for(Path(tmp))
            with patch("archdemo.templates.shutil.copytree", side_effect=PermissionError("denied")):
                with self.assertRaises(PermissionError):
                    ensure_demo_project(demo_dir)
            self.assertFalse(demo_dir.exists())


class ManifestTests(unittest.TestCase):
    def test_manifest_points_at_shared_libraries(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = write_demo_manifest(Path(tmp))
            manifest = load_manifest(path)
            self.assertEqual(manifest["package"]["name"], "arch-demo-app")
            self.assertEqual(manifest["package"]["version"], "0.1.0")
            self.assertEqual(manifest["package"]["edition"], "2021")
            self.assertEqual(
                manifest["dependencies"],
                {
                    "common": {"path": "../../common"},
                    "program": {"path": "../../program"},
                    "bip322": {"path": "../../bip322"},
                },
            )

    def test_load_manifest_missing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(FileNotFoundError):
                load_manifest(Path(tmp) / "Cargo.toml")


if __name__ == "__main__":
    unittest.main()
