from __future__ import annotations

from pathlib import Path

import pytest

from create_vite import OperationCancelled, Question


class ScriptedAsk:
    """Stand-in for the terminal asker that replays canned answers.

    Text answers are typed one character at a time through ``on_state``.
    Choice answers are matched against the choice values, or against the
    ``name`` attribute of the value for framework menus.
    """

    def __init__(self, answers: dict, cancel_at: str | None = None):
        self.answers = answers
        self.cancel_at = cancel_at
        self.asked: list[str] = []

    def __call__(self, question: Question):
        self.asked.append(question.name)
        answer = self.answers.get(question.name)
        if question.choices is None:
            typed = ""
            for char in answer or "":
                typed += char
                if question.on_state:
                    question.on_state(typed)
            if self.cancel_at == question.name:
                raise OperationCancelled()
            return typed or question.initial
        if self.cancel_at == question.name:
            raise OperationCancelled()
        for choice in question.choices:
            value = choice.value
            if value == answer or getattr(value, "name", None) == answer:
                return value
        raise AssertionError(f"no choice {answer!r} for {question.name}")


@pytest.fixture()
def scripted_ask():
    return ScriptedAsk


@pytest.fixture()
def templates_root(tmp_path: Path) -> Path:
    root = tmp_path / "templates"
    vue_ts = root / "template-vue-ts"
    (vue_ts / "src" / "components").mkdir(parents=True)
    (vue_ts / "index.html").write_text("<div id=\"app\"></div>\n")
    (vue_ts / "_gitignore").write_bytes(b"node_modules\ndist\n*.local\n")
    (vue_ts / "src" / "main.ts").write_text("import { createApp } from 'vue'\n")
    (vue_ts / "src" / "components" / "HelloWorld.vue").write_text("<template></template>\n")

    react = root / "template-react"
    (react / "public").mkdir(parents=True)
    (react / "package.json").write_text("{\"name\": \"vite-react\"}\n")
    (react / "public" / "vite.svg").write_bytes(b"<svg/>")
    return root
