import logging

import pytest

import idgen_config
from node_identity import (
    MAX_NODE_ID,
    EnvironmentNodeIdSource,
    FixedNodeIdSource,
    NodeIdSource,
    validate_node_id,
)


def test_fixed_source_defaults_to_placeholder():
    assert FixedNodeIdSource().get_node_id() == idgen_config.DEFAULT_NODE_ID == 1023


def test_fixed_source_returns_its_value():
    assert FixedNodeIdSource(17).get_node_id() == 17


@pytest.mark.parametrize("bad", [-1, MAX_NODE_ID + 1, "5", 2.0, True])
def test_invalid_node_ids_rejected(bad):
    with pytest.raises(ValueError):
        validate_node_id(bad)


def test_node_id_bounds_accepted():
    assert validate_node_id(0) == 0
    assert validate_node_id(MAX_NODE_ID) == MAX_NODE_ID


def test_base_source_is_abstract():
    with pytest.raises(NotImplementedError):
        NodeIdSource().get_node_id()


def test_environment_source_parses_value():
    assert EnvironmentNodeIdSource(" 300 ").get_node_id() == 300


def test_environment_source_reads_config(monkeypatch):
    monkeypatch.setattr(idgen_config, "NODE_ID", "12")
    assert EnvironmentNodeIdSource().get_node_id() == 12


def test_environment_source_falls_back_to_placeholder(monkeypatch, caplog):
    monkeypatch.setattr(idgen_config, "NODE_ID", None)
    with caplog.at_level(logging.WARNING, logger="node_identity"):
        assert EnvironmentNodeIdSource().get_node_id() == idgen_config.DEFAULT_NODE_ID
    assert "GLOBAL_ID_NODE_ID not set" in caplog.text


def test_environment_source_rejects_garbage():
    with pytest.raises(ValueError):
        EnvironmentNodeIdSource("node-seven").get_node_id()


def test_environment_source_rejects_out_of_range():
    with pytest.raises(ValueError):
        EnvironmentNodeIdSource("4096").get_node_id()


def test_environment_source_error_hides_int_parse_traceback():
    with pytest.raises(ValueError) as excinfo:
        EnvironmentNodeIdSource("12abc").get_node_id()
    assert "GLOBAL_ID_NODE_ID is not an integer" in str(excinfo.value)
    assert excinfo.value.__cause__ is None
    assert excinfo.value.__suppress_context__
