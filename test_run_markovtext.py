# -*- coding: utf-8 -*-
import io
import os
import shutil
import tempfile
import unittest
from contextlib import redirect_stdout, redirect_stderr

import markovtext
import run_markovtext


class TestCommandLine(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.corpus = os.path.join(self.tmpdir, "corpus.txt")
        with open(self.corpus, "w", encoding="utf8") as fout:
            fout.write("I am not a number\nI am a free man\n")
        self.model = os.path.join(self.tmpdir, "model.txt")

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def run_main(self, *argv):
        stdout, stderr = io.StringIO(), io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            run_markovtext.main(list(argv))
        return stdout.getvalue(), stderr.getvalue()

    def assert_exit(self, status, *argv):
        with self.assertRaises(SystemExit) as cm:
            self.run_main(*argv)
        self.assertEqual(cm.exception.code, status)

    def test_build_then_generate(self):
        _, progress = self.run_main("build", "2", self.model, self.corpus)
        self.assertIn("processed", progress)
        chain = markovtext.load_chain(self.model)
        self.assertEqual(chain.prefix_len, 2)
        self.assertEqual(chain.suffixes(("I", "am")).items(),
                         [("not", 1), ("a", 1)])

        out, _ = self.run_main("generate", self.model, "20", "--seed", "3")
        lines = out.splitlines()
        self.assertEqual(len(lines), 1)
        words = lines[0].split()
        self.assertEqual(words[:2], ["I", "am"])
        self.assertLessEqual(len(words), 20)

    def test_read_alias(self):
        self.run_main("read", "1", self.model, self.corpus)
        self.assertTrue(os.path.exists(self.model))

    def test_seeded_generation_is_repeatable(self):
        self.run_main("build", "1", self.model, self.corpus)
        first, _ = self.run_main("generate", self.model, "15", "--seed", "9")
        second, _ = self.run_main("generate", self.model, "15", "--seed", "9")
        self.assertEqual(first, second)

    def test_non_positive_prefix_rejected_before_io(self):
        missing = os.path.join(self.tmpdir, "missing.txt")
        for value in ("0", "-2", "two"):
            self.assert_exit(run_markovtext.EXIT_USAGE,
                             "build", value, self.model, missing)
        self.assertFalse(os.path.exists(self.model))

    def test_non_positive_word_count_rejected(self):
        missing = os.path.join(self.tmpdir, "missing.txt")
        for value in ("0", "-5", "many"):
            self.assert_exit(run_markovtext.EXIT_USAGE,
                             "generate", missing, value)

    def test_generate_arity(self):
        self.run_main("build", "1", self.model, self.corpus)
        self.assert_exit(run_markovtext.EXIT_USAGE, "generate", self.model)
        self.assert_exit(run_markovtext.EXIT_USAGE,
                         "generate", self.model, "5", "extra")

    def test_build_needs_an_input(self):
        self.assert_exit(run_markovtext.EXIT_USAGE, "build", "2", self.model)

    def test_unknown_command(self):
        self.assert_exit(run_markovtext.EXIT_USAGE, "train", "2")
        self.assert_exit(run_markovtext.EXIT_USAGE)

    def test_missing_input_file(self):
        missing = os.path.join(self.tmpdir, "missing.txt")
        self.assert_exit(run_markovtext.EXIT_NO_INPUT,
                         "build", "2", self.model, self.corpus, missing)
        self.assertFalse(os.path.exists(self.model))

    def test_uncreatable_model_file(self):
        model = os.path.join(self.tmpdir, "absent", "model.txt")
        self.assert_exit(run_markovtext.EXIT_NO_OUTPUT,
                         "build", "2", model, self.corpus)

    def test_missing_model_file(self):
        self.assert_exit(run_markovtext.EXIT_NO_INPUT,
                         "generate", self.model, "5")

    def test_malformed_model_file(self):
        with open(self.model, "w", encoding="utf8") as fout:
            fout.write("not a number\n")
        self.assert_exit(run_markovtext.EXIT_NO_INPUT,
                         "generate", self.model, "5")

    def test_model_with_huge_counts(self):
        with open(self.model, "w", encoding="utf8") as fout:
            fout.write('1\n"" a 9223372036854775807 b 9223372036854775807\n')
        out, _ = self.run_main("generate", self.model, "5", "--seed", "1")
        self.assertIn(out.strip(), ("a", "b"))


if __name__ == "__main__":
    unittest.main()
