"""
API 注册表与定义模型测试
"""

from concurrent.futures import ThreadPoolExecutor

import pytest
from pydantic import ValidationError

from capability_hub.anyapi.definitions import BUILTIN_APIS, CURATED_APIS
from capability_hub.anyapi.models import APIDefinition, APIEndpoint, APIParameter, AuthType
from capability_hub.anyapi.registry import APIRegistry, get_api_registry
from capability_hub.core.errors import DuplicateAPIRegistrationError


def make_definition(api_id: str, **overrides) -> APIDefinition:
    data = {
        "id": api_id,
        "name": f"API {api_id}",
        "description": "Test API",
        "base_url": "https://example.com",
        "endpoints": [APIEndpoint(name="ping", path="/ping")],
    }
    data.update(overrides)
    return APIDefinition(**data)


class TestAPIDefinition:
    """定义模型校验"""

    def test_undeclared_placeholder_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            APIEndpoint(name="get_item", path="/items/{id}")
        assert "undeclared" in str(exc_info.value)

    def test_declared_placeholder_accepted(self):
        endpoint = APIEndpoint(
            name="get_item",
            path="/items/{id}",
            parameters=[APIParameter(name="id", required=True)],
        )
        assert endpoint.parameters[0].name == "id"

    def test_requires_auth_without_type_rejected(self):
        with pytest.raises(ValidationError):
            make_definition("secure", requires_auth=True)

    def test_apikey_requires_header_name(self):
        with pytest.raises(ValidationError):
            make_definition("keyed", requires_auth=True, auth_type=AuthType.APIKEY)

    def test_query_auth_requires_param_name(self):
        with pytest.raises(ValidationError):
            make_definition("queried", requires_auth=True, auth_type=AuthType.QUERY)

    def test_duplicate_endpoint_names_rejected(self):
        with pytest.raises(ValidationError):
            make_definition(
                "dupes",
                endpoints=[
                    APIEndpoint(name="ping", path="/ping"),
                    APIEndpoint(name="ping", path="/ping2"),
                ],
            )

    def test_camel_case_input_and_output(self):
        definition = APIDefinition.model_validate(
            {
                "id": "camel",
                "name": "Camel",
                "baseUrl": "https://camel.example.com",
                "requiresAuth": True,
                "authType": "apikey",
                "authHeaderName": "X-Key",
                "endpoints": [{"name": "list", "path": "/list", "queryParams": [{"name": "q"}]}],
            }
        )
        public = definition.to_public()
        assert public["baseUrl"] == "https://camel.example.com"
        assert public["authHeaderName"] == "X-Key"
        assert public["endpoints"][0]["queryParams"][0]["name"] == "q"

    def test_get_endpoint_by_name_then_path(self):
        coingecko = BUILTIN_APIS[0]
        assert coingecko.get_endpoint("simple_price").path == "/simple/price"
        assert coingecko.get_endpoint("/simple/price").name == "simple_price"
        assert coingecko.get_endpoint("missing") is None


class TestAPIRegistry:
    """注册表测试"""

    def test_builtin_catalogue(self, registry):
        assert set(registry.ids()) == {
            "coingecko",
            "openweather",
            "jsonplaceholder",
            "restcountries",
            "github",
        }

    def test_get_returns_same_identity(self, registry):
        for definition in BUILTIN_APIS:
            stored = registry.get(definition.id)
            assert stored.id == definition.id
            assert stored.base_url == definition.base_url
            assert stored.endpoint_names == definition.endpoint_names

    def test_get_unknown_returns_none(self, registry):
        assert registry.get("nope") is None
        assert "nope" not in registry

    def test_register_duplicate_rejected(self, registry):
        with pytest.raises(DuplicateAPIRegistrationError) as exc_info:
            registry.register(make_definition("coingecko"))
        assert exc_info.value.error_code.value == "DUPLICATE_API_REGISTRATION"
        assert registry.get("coingecko").name == "CoinGecko"

    def test_concurrent_same_id_single_winner(self):
        registry = APIRegistry()

        def attempt(_):
            try:
                registry.register(make_definition("race"))
                return True
            except DuplicateAPIRegistrationError:
                return False

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(attempt, range(16)))

        assert results.count(True) == 1
        assert len(registry) == 1

    def test_concurrent_distinct_ids_all_stored(self):
        registry = APIRegistry()
        ids = [f"api_{i}" for i in range(32)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda i: registry.register(make_definition(i)), ids))

        assert sorted(registry.ids()) == sorted(ids)

    def test_search_is_case_insensitive(self, registry):
        ids = {api.id for api in registry.search("WEATHER")}
        assert ids == {"openweather"}

    def test_summary(self, registry):
        summary = registry.summary()
        assert summary["total"] == 5
        assert summary["authenticated"] == 1
        assert summary["public"] == 4
        coingecko = next(a for a in summary["apis"] if a["id"] == "coingecko")
        assert coingecko["endpointCount"] == 7

    def test_process_registry_is_shared(self):
        assert get_api_registry() is get_api_registry()
        assert "github" in get_api_registry()

    def test_curated_set_is_distinct(self):
        curated = APIRegistry(CURATED_APIS)
        assert set(curated.ids()) == {"coingecko", "openweather", "github"}
        assert curated.get("coingecko").endpoint_names == ["simple_price"]
        q = curated.get("openweather").endpoints[0].query_params[0]
        assert q.name == "q" and q.required

    def test_reads_are_repeatable(self, registry):
        def shape(apis):
            return [(a.id, a.base_url, a.endpoint_names) for a in apis]

        first_list = shape(registry.list())
        first_search = shape(registry.search("api"))
        first_get = shape([registry.get("github")])

        for _ in range(3):
            assert shape(registry.list()) == first_list
            assert shape(registry.search("api")) == first_search
            assert shape([registry.get("github")]) == first_get

    def test_register_leaves_earlier_snapshot_unchanged(self, registry):
        before = registry.list()
        before_ids = [a.id for a in before]

        registry.register(make_definition("notes", description="Notes api"))

        assert [a.id for a in before] == before_ids
        assert [a.id for a in registry.list()] == before_ids + ["notes"]
        assert "notes" in {a.id for a in registry.search("notes")}
        assert registry.get("notes").base_url == "https://example.com"
