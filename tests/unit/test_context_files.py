"""Unit tests for YAML context files."""

import pytest

from rentdocs.contexts.templating.context_files import load_context_file


@pytest.mark.unit
def test_layers_and_predicates(tmp_path):
    path = tmp_path / "ctx.yaml"
    path.write_text(
        "layers:\n"
        "  reservation:\n"
        "    reservationCode: R-1042\n"
        "    numberOfPeople: 2\n"
        "    notes: null\n"
        "  override:\n"
        "    reservationCode: R-2\n"
        "predicates:\n"
        "  depositTypeSDW: true\n"
    )

    context, predicates = load_context_file(path)

    assert context.layer_names == ["reservation", "override"]
    assert context.lookup("reservationCode") == "R-2"
    assert context.lookup("numberOfPeople") == "2"
    assert context.lookup("notes") == ""
    assert predicates == {"depositTypeSDW": True}


@pytest.mark.unit
def test_no_file_gives_empty_context():
    context, predicates = load_context_file(None)

    assert context.layer_names == []
    assert predicates == {}
