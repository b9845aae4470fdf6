# ==============================================================================
# Файл: tests/test_config.py
# Назначение: Тесты конфигурации превью и скрипта run_preview.
# ==============================================================================
import unittest
import tempfile
import subprocess
import os

import numpy as np

import sys
from pathlib import Path

ROOT = Path(__file__).parent.parent
sys.path.append(str(ROOT))

from setting.config import PreviewConfig
import run_preview


class TestPreviewConfig(unittest.TestCase):

    def test_defaults_match_editor_preview(self):
        cfg = PreviewConfig()
        cfg.validate()
        self.assertEqual((cfg.width, cfg.height, cfg.seed), (64, 64, 1337))

    def test_validate_rejects_bad_values(self):
        for kwargs in ({"width": 0}, {"height": -2}, {"workers": 0}, {"batch_rows": 0}):
            with self.assertRaises(ValueError):
                PreviewConfig(**kwargs).validate()

    def test_parser_defaults_come_from_config(self):
        args = run_preview.build_parser().parse_args([])
        self.assertIsNone(args.combine)
        self.assertEqual((args.width, args.height, args.seed, args.workers), (64, 64, 1337, 1))

    def test_parser_reads_options(self):
        args = run_preview.build_parser().parse_args(
            ["--multiply", "--width", "128", "--seed=7", "--log-level", "DEBUG", "--dump", "out.npy"])
        self.assertEqual(args.combine, "multiply")
        self.assertEqual(args.width, 128)
        self.assertEqual(args.seed, 7)
        self.assertEqual(args.log_level, "DEBUG")
        self.assertEqual(args.dump_path, "out.npy")


class TestRunPreview(unittest.TestCase):

    def test_build_graph_wires_combine_node(self):
        g = run_preview.build_graph("multiply")
        self.assertEqual(g.node("n4").kind, "multiply")
        self.assertEqual(g.source_for("n3", "n3-h").source.node_id, "n4")
        self.assertEqual(run_preview.build_graph(None).connections, ())

    def test_main_dumps_grid(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "grid.npy")
            code = run_preview.main(["--add", "--width", "8", "--height", "6",
                                     "--dump", path, "--log-level", "WARNING"])
            self.assertEqual(code, 0)
            grid = np.load(path)
            self.assertEqual(grid.shape, (6, 8))
            self.assertTrue(np.isfinite(grid).all())

    def test_main_rejects_bad_args(self):
        for argv in (["--width=-1"], ["--workers", "0"], ["--width", "abc"], ["--add", "--multiply"]):
            with self.assertRaises(SystemExit) as cm:
                run_preview.main(argv)
            self.assertEqual(cm.exception.code, 2, msg=repr(argv))

    def test_parallel_run_exits_in_fresh_process(self):
        # первый вызов ядра numba при workers>1 - в свежем процессе
        proc = subprocess.run(
            [sys.executable, str(ROOT / "run_preview.py"), "--add",
             "--width", "32", "--height", "32", "--workers", "4", "--log-level", "WARNING"],
            cwd=str(ROOT), capture_output=True, text=True, timeout=300,
        )
        self.assertEqual(proc.returncode, 0, msg=proc.stderr)


if __name__ == '__main__':
    unittest.main()
