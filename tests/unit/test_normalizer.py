"""Unit tests for single query normalization"""
import pytest

from opmon.queries.normalizer import apply_defaults, normalize_query
from opmon.schemas import Query, Scope
from opmon.static import DEFAULT_QUERY, QueryMode


class TestApplyDefaults:
    """Test sentinel filling"""

    def test_empty_query_gets_every_default(self):
        query = apply_defaults(Query())
        for field, default in DEFAULT_QUERY.items():
            assert getattr(query, field) == default

    def test_set_values_are_kept(self):
        query = apply_defaults(Query(host="web01", hardState=False))
        assert query.host == "web01"
        assert query.hard_state_only is False


class TestNormalizeQuery:
    """Test the clearing rules and field pipeline"""

    def test_system_mode_clears_host_and_service(self):
        normalized = normalize_query(Query(mode=QueryMode.SYSTEM, host="db1", service="svcA"))
        assert normalized.mode == QueryMode.SYSTEM
        assert normalized.host == ""
        assert normalized.service == ""

    @pytest.mark.parametrize("field", ["host", "service", "metric"])
    def test_sentinel_values_are_cleared(self, field):
        normalized = normalize_query(Query(**{field: DEFAULT_QUERY[field]}))
        assert getattr(normalized, field) == ""

    def test_absent_fields_are_defaulted_then_cleared(self):
        normalized = normalize_query(Query())
        assert normalized.host == ""
        assert normalized.service == ""
        assert normalized.metric == ""
        assert normalized.hostgroup == DEFAULT_QUERY["hostgroup"]
        assert normalized.service_catalog == DEFAULT_QUERY["service_catalog"]
        assert normalized.time_cut == "24x7"

    def test_set_notation_is_compressed(self):
        normalized = normalize_query(Query(host="{web01,web02}", serviceCatalog="{shop}"))
        assert normalized.host == "/^(web01|web02)$/"
        assert normalized.service_catalog == "/^(shop)$/"

    def test_variables_resolve_before_compression(self, scope):
        normalized = normalize_query(Query(host="$host", service="$services"), scope)
        assert normalized.host == "web01"
        assert normalized.service == "/^(http|ssh)$/"

    def test_unresolved_variable_passes_through(self, scope):
        normalized = normalize_query(Query(host="$unknown"), scope)
        assert normalized.host == "$unknown"

    def test_variable_resolving_to_sentinel_is_cleared(self):
        scope = Scope(scopedVars={"h": "- select host -"})
        assert normalize_query(Query(host="$h"), scope).host == ""

    def test_free_text_target_is_resolved(self, scope):
        assert normalize_query(Query(target="$env.cpu"), scope).target == "prod.cpu"

    def test_input_is_not_mutated(self):
        query = Query(mode=QueryMode.SYSTEM, host="db1")
        normalize_query(query)
        assert query.host == "db1"
        assert query.service is None

    def test_extra_fields_survive(self):
        normalized = normalize_query(Query.model_validate({"host": "a", "datasource": {"uid": "x"}}))
        assert normalized.to_payload()["datasource"] == {"uid": "x"}

    def test_wire_names(self):
        payload = normalize_query(Query(mode=1, service="http")).to_payload()
        assert payload["mode"] == 1
        assert payload["objecttype"] == "Host"
        assert payload["hardState"] is True
        assert payload["serviceCatalog"] == DEFAULT_QUERY["service_catalog"]
        assert payload["hide"] is False
