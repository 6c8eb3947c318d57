import json
import os

import pytest

from pipelines.config_synth import build_config_document, new_output_path, synthesize_config
from pipelines.errors import ScratchIOFailure
from pipelines.spec import IngestionRequest, OutputMode, TransformOptions

URL = "https://github.com/acme/widgets"


def test_defaults_when_options_omitted():
    doc = build_config_document(IngestionRequest(repository_url=URL), "/tmp/out.txt")

    out = doc["output"]
    assert out["filePath"] == "/tmp/out.txt"
    assert out["style"] == "plain"
    assert out["compress"] is False
    assert out["removeComments"] is False
    assert out["removeEmptyLines"] is False
    assert doc["include"] == ["**/*"]
    assert doc["ignore"] == {"useGitignore": True, "useDefaultPatterns": True, "customPatterns": []}
    assert doc["security"] == {"enableSecurityCheck": False}


@pytest.mark.parametrize(
    "opts, expected",
    [
        (TransformOptions(compress=True), (True, False, False)),
        (TransformOptions(remove_comments=True), (False, True, False)),
        (TransformOptions(remove_empty_lines=True), (False, False, True)),
        (TransformOptions(True, True, True), (True, True, True)),
        (TransformOptions(False, False, False), (False, False, False)),
    ],
)
def test_caller_options_overlay_only_where_given(opts, expected):
    doc = build_config_document(IngestionRequest(repository_url=URL, options=opts), "/tmp/out.txt")
    out = doc["output"]
    assert (out["compress"], out["removeComments"], out["removeEmptyLines"]) == expected


def test_selected_files_passes_selection_verbatim():
    selection = "src/a.py, docs/*.md,,weird path/ü.txt"
    req = IngestionRequest(repository_url=URL, output_mode=OutputMode.SELECTED_FILES, selection=selection)

    doc = build_config_document(req, "/tmp/out.xml")

    assert doc["output"]["style"] == "xml"
    assert doc["include"] == [selection]


def test_selection_ignored_in_full_text_mode():
    req = IngestionRequest(repository_url=URL, selection="src/a.py")
    assert build_config_document(req, "/tmp/out.txt")["include"] == ["**/*"]


def test_synthesize_writes_json_under_fresh_dir(tmp_path):
    config_dir = tmp_path / "nested" / "config"
    req = IngestionRequest(repository_url=URL, options=TransformOptions(compress=True))

    artifact = synthesize_config(req, "/tmp/out.txt", str(config_dir))

    assert os.path.dirname(artifact.path) == str(config_dir)
    assert os.path.basename(artifact.path).startswith("repomix-config-")
    assert artifact.path.endswith(".json")
    with open(artifact.path, encoding="utf-8") as f:
        on_disk = json.load(f)
    assert on_disk == artifact.document
    assert on_disk["output"]["compress"] is True
    assert artifact.output_path == "/tmp/out.txt"


def test_synthesize_paths_are_unique(tmp_path):
    req = IngestionRequest(repository_url=URL)
    paths = {synthesize_config(req, "/tmp/out.txt", str(tmp_path)).path for _ in range(50)}
    assert len(paths) == 50


def test_output_paths_are_unique_and_typed(tmp_path):
    txt = {new_output_path(str(tmp_path)) for _ in range(50)}
    assert len(txt) == 50
    assert all(p.endswith(".txt") for p in txt)
    assert new_output_path(str(tmp_path), OutputMode.SELECTED_FILES).endswith(".xml")


def test_unwritable_config_dir_is_scratch_failure(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")

    with pytest.raises(ScratchIOFailure):
        synthesize_config(IngestionRequest(repository_url=URL), "/tmp/out.txt", str(blocker / "config"))
