import pytest

from agent_registry_ens.core.id_format import format_agent_id, parse_agent_id


class TestParseAgentId:
    def test_parses_parts(self):
        assert parse_agent_id("8453:1234") == (8453, 1234)

    def test_large_values(self):
        token_id = 2**200
        assert parse_agent_id(f"1:{token_id}") == (1, token_id)

    @pytest.mark.parametrize("agent_id", ["1234", "", ":1", "1:", "a:1", "1:0x10", "1:2:3", " 1:2", 12])
    def test_rejects_malformed(self, agent_id):
        with pytest.raises(ValueError):
            parse_agent_id(agent_id)


class TestFormatAgentId:
    def test_formats(self):
        assert format_agent_id(11155111, 7) == "11155111:7"

    def test_round_trip(self):
        assert parse_agent_id(format_agent_id(1, 42)) == (1, 42)

    def test_negative(self):
        with pytest.raises(ValueError):
            format_agent_id(-1, 1)
