"""
Tests for the edit session: editor passes, temp file handling and the post-edit review.

Run with:
    pytest tests/test_editor.py -v
"""

import os
import subprocess

import pytest

from aicommit.review import Decision, EditResult, EditSession, EditorError, ReviewResult
from aicommit.review import editor as editor_module
from aicommit.review.editor import edit_in_editor, resolve_editor

from conftest import ScriptedReviewer


class FakeEditor:
    """Replaces subprocess.run: records the file it was given and rewrites it."""

    def __init__(self, *texts, returncode=0, missing=False, remove=False):
        self.texts = list(texts)
        self.returncode = returncode
        self.missing = missing
        self.remove = remove
        self.paths = []
        self.seen = []

    def __call__(self, args, check=False, **kwargs):
        path = args[-1]
        self.paths.append(path)
        with open(path, encoding='utf-8', newline='') as f:
            self.seen.append(f.read())
        if self.missing:
            raise FileNotFoundError(2, "No such file or directory", args[0])
        if self.returncode:
            raise subprocess.CalledProcessError(self.returncode, args)
        if self.remove:
            os.unlink(path)
        elif self.texts:
            text = self.texts.pop(0)
            if isinstance(text, bytes):
                with open(path, 'wb') as f:
                    f.write(text)
            else:
                with open(path, 'w', encoding='utf-8', newline='') as f:
                    f.write(text)
        return subprocess.CompletedProcess(args, 0)


@pytest.fixture
def fake_editor(monkeypatch):
    def install(*texts, **kwargs):
        fake = FakeEditor(*texts, **kwargs)
        monkeypatch.setattr(editor_module.subprocess, "run", fake)
        return fake
    return install


# ---------------------------------------------------------------------------
# Editor resolution
# ---------------------------------------------------------------------------

class TestResolveEditor:

    def test_setting_wins(self, monkeypatch):
        monkeypatch.setenv("VISUAL", "code --wait")
        assert resolve_editor("nano") == ["nano"]

    def test_visual_before_editor(self, monkeypatch):
        monkeypatch.setenv("VISUAL", "code --wait")
        monkeypatch.setenv("EDITOR", "vim")
        assert resolve_editor() == ["code", "--wait"]

    def test_editor_env(self, monkeypatch):
        monkeypatch.delenv("VISUAL", raising=False)
        monkeypatch.setenv("EDITOR", "vim")
        assert resolve_editor() == ["vim"]

    def test_platform_default(self, monkeypatch):
        monkeypatch.delenv("VISUAL", raising=False)
        monkeypatch.delenv("EDITOR", raising=False)
        monkeypatch.setattr(editor_module.sys, "platform", "linux")
        assert resolve_editor() == ["vi"]


# ---------------------------------------------------------------------------
# Single pass
# ---------------------------------------------------------------------------

class TestEditInEditor:

    def test_round_trip(self, fake_editor):
        fake = fake_editor("fix: edited\n\n- body\n")
        result = edit_in_editor("feat: original", ["vim"])
        assert fake.seen == ["feat: original"]
        assert result == "fix: edited\n\n- body\n"

    def test_unchanged_text_returned_verbatim(self, fake_editor):
        fake_editor()
        assert edit_in_editor("feat: keep\r\n", ["vim"]) == "feat: keep\r\n"

    def test_temp_file_named_for_commit_messages(self, fake_editor):
        fake = fake_editor()
        edit_in_editor("feat: x", ["vim"])
        name = fake.paths[0].replace("\\", "/").rsplit("/", 1)[-1]
        assert name.startswith("COMMIT_EDITMSG")
        assert name.endswith(".gitcommit")

    def test_temp_file_removed_after_success(self, fake_editor):
        fake = fake_editor("fix: edited")
        edit_in_editor("feat: x", ["vim"])
        assert not os.path.exists(fake.paths[0])

    def test_editor_failure(self, fake_editor):
        fake = fake_editor(returncode=1)
        with pytest.raises(EditorError) as exc:
            edit_in_editor("feat: x", ["vim"])
        assert "status 1" in str(exc.value)
        assert not os.path.exists(fake.paths[0])

    def test_missing_editor(self, fake_editor):
        fake = fake_editor(missing=True)
        with pytest.raises(EditorError) as exc:
            edit_in_editor("feat: x", ["no-such-editor"])
        assert "not found" in str(exc.value)
        assert not os.path.exists(fake.paths[0])

    def test_non_utf8_file(self, fake_editor):
        fake = fake_editor("fix: caf\xe9 menu".encode("latin-1"))
        with pytest.raises(EditorError) as exc:
            edit_in_editor("feat: x", ["vim"])
        assert "not valid UTF-8" in str(exc.value)
        assert not os.path.exists(fake.paths[0])

    def test_file_removed_by_editor(self, fake_editor):
        fake = fake_editor(remove=True)
        with pytest.raises(EditorError) as exc:
            edit_in_editor("feat: x", ["vim"])
        assert "disappeared" in str(exc.value)
        assert not os.path.exists(fake.paths[0])


# ---------------------------------------------------------------------------
# Session loop
# ---------------------------------------------------------------------------

class TestEditSession:

    def test_confirm_returns_edited_text(self, fake_editor):
        fake_editor("fix: edited")
        reviewer = ScriptedReviewer(Decision.CONFIRM)
        result = EditSession(editor="vim", reviewer=reviewer).run("feat: original")

        assert result == EditResult(Decision.CONFIRM, "fix: edited")
        assert reviewer.shown == [("fix: edited", True, False)]

    def test_edit_again_reopens_with_latest_text(self, fake_editor):
        fake = fake_editor("fix: first edit", "fix: second edit")
        reviewer = ScriptedReviewer(Decision.EDIT, Decision.CONFIRM)
        result = EditSession(editor="vim", reviewer=reviewer).run("feat: original")

        assert fake.seen == ["feat: original", "fix: first edit"]
        assert result.message == "fix: second edit"
        assert len(fake.paths) == 2

    @pytest.mark.parametrize("decision", [Decision.REGENERATE, Decision.CANCEL])
    def test_other_decisions_end_session(self, fake_editor, decision):
        fake = fake_editor("fix: edited")
        result = EditSession(editor="vim", reviewer=ScriptedReviewer(decision)).run("feat: x")
        assert result.decision is decision
        assert not os.path.exists(fake.paths[0])

    def test_clue_offered_when_enabled(self, fake_editor):
        fake_editor("fix: edited")
        reviewer = ScriptedReviewer(ReviewResult(Decision.CLUE, "mention tests"))
        result = EditSession(editor="vim", reviewer=reviewer, offer_clue=True).run("feat: x")

        assert reviewer.shown[0][2] is True
        assert result == EditResult(Decision.CLUE, "fix: edited", "mention tests")

    def test_editor_error_propagates(self, fake_editor):
        fake_editor(returncode=2)
        with pytest.raises(EditorError):
            EditSession(editor="vim", reviewer=ScriptedReviewer()).run("feat: x")

    def test_announces_edit(self, fake_editor, capsys):
        fake_editor("fix: edited")
        EditSession(editor="vim", reviewer=ScriptedReviewer(Decision.CANCEL)).run("feat: x")
        assert "Commit message edited!" in capsys.readouterr().out
