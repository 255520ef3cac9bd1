"""Unit tests for batch target processing"""
from opmon.queries.targets import build_request, filter_targets, missing_fields
from opmon.schemas import Query, QueryRequest, Scope
from opmon.static import DEFAULT_QUERY, QueryMode


class TestFilterTargets:
    """Test disabled and structural filtering"""

    def test_hidden_targets_are_dropped(self, availability_query):
        hidden = availability_query.model_copy(update={"disabled": True})
        assert filter_targets([hidden, availability_query]) == [availability_query]

    def test_capacity_without_service_is_dropped(self):
        capacity = Query(mode=QueryMode.CAPACITY, service=DEFAULT_QUERY["service"])
        assert filter_targets([capacity]) == []

    def test_capacity_with_service_is_kept(self):
        capacity = Query(mode=QueryMode.CAPACITY, service="http")
        assert filter_targets([capacity]) == [capacity]

    def test_missing_fields(self, availability_query):
        assert missing_fields(availability_query) == []
        assert missing_fields(Query(host="a")) == [
            "service", "hostgroup", "servicegroup", "service_catalog", "metric"
        ]


class TestBuildRequest:
    """Test full batch normalization"""

    def test_only_disabled_and_capacity_defaults_yield_empty(self, availability_query):
        request = QueryRequest(targets=[
            availability_query.model_copy(update={"disabled": True}),
            availability_query.model_copy(update={"mode": QueryMode.CAPACITY, "service": "- select service -"}),
        ])
        assert build_request(request).targets == []

    def test_structurally_incomplete_targets_are_excluded(self, availability_query):
        request = QueryRequest(targets=[Query(refId="B", host="web01"), availability_query])
        targets = build_request(request).targets
        assert [t.ref_id for t in targets] == ["A"]

    def test_targets_are_normalized_in_order(self, availability_query, scope):
        second = availability_query.model_copy(update={"ref_id": "B", "host": "$host", "service": "$services"})
        request = QueryRequest(targets=[availability_query, second])
        targets = build_request(request, scope).targets

        assert [t.ref_id for t in targets] == ["A", "B"]
        assert targets[0].metric == ""
        assert targets[1].host == "web01"
        assert targets[1].service == "/^(http|ssh)$/"

    def test_ambient_context_is_attached(self, availability_query, scope):
        request = QueryRequest(targets=[availability_query], scopedVars={"__interval": {"text": "1m", "value": "1m"}})
        outbound = build_request(request, scope)

        assert [f.key for f in outbound.adhoc_filters] == ["site"]
        assert outbound.scoped_vars["host"]["value"] == "web01"
        assert outbound.scoped_vars["__interval"] == {"text": "1m", "value": "1m"}
        assert "filters" not in outbound.scoped_vars

        payload = outbound.to_payload()
        assert payload["adhocFilters"] == [{"key": "site", "operator": "=", "value": "dc1"}]
        assert payload["targets"][0]["host"] == "web01"

    def test_request_scoped_vars_resolve_targets(self, availability_query):
        target = availability_query.model_copy(update={"host": "$repeat"})
        request = QueryRequest(targets=[target], scopedVars={"repeat": {"text": "db2", "value": "db2"}})
        assert build_request(request, Scope()).targets[0].host == "db2"

    def test_input_request_is_not_mutated(self, availability_query):
        hidden = availability_query.model_copy(update={"disabled": True})
        request = QueryRequest(targets=[hidden, availability_query])
        build_request(request)

        assert len(request.targets) == 2
        assert request.targets[1].metric == DEFAULT_QUERY["metric"]
        assert request.adhoc_filters == []
