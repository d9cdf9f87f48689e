"""
内置 API 定义

BUILTIN_APIS: AnyAPI 工具服务器使用的完整目录
CURATED_APIS: Capability 直调使用的精选（预先审核）子集
"""

from typing import List

from capability_hub.anyapi.models import (
    APIDefinition,
    APIEndpoint,
    APIParameter,
    AuthType,
    HTTPMethod,
    RateLimit,
)

JSON_ACCEPT = {"Accept": "application/json"}


# CoinGecko - 免费加密货币行情
COINGECKO = APIDefinition(
    id="coingecko",
    name="CoinGecko",
    description="Free cryptocurrency data API - prices, market data, exchanges, and more",
    base_url="https://api.coingecko.com/api/v3",
    requires_auth=False,
    rate_limit=RateLimit(requests_per_minute=10),
    common_headers=JSON_ACCEPT,
    endpoints=[
        APIEndpoint(
            name="ping",
            path="/ping",
            description="Check API server status",
            example_response={"gecko_says": "(V3) To the Moon!"},
        ),
        APIEndpoint(
            name="simple_price",
            path="/simple/price",
            description="Get current price of any cryptocurrencies in any other supported currencies",
            query_params=[
                APIParameter(name="ids", required=True, description="Coin IDs (comma-separated): bitcoin,ethereum"),
                APIParameter(name="vs_currencies", required=True, description="Target currencies (comma-separated): usd,eur"),
                APIParameter(name="include_market_cap", type="boolean", description="Include market cap", default=False),
                APIParameter(name="include_24hr_vol", type="boolean", description="Include 24hr volume", default=False),
                APIParameter(name="include_24hr_change", type="boolean", description="Include 24hr change", default=False),
            ],
            example_request={"queryParams": {"ids": "bitcoin,ethereum", "vs_currencies": "usd"}},
            example_response={"bitcoin": {"usd": 45000}, "ethereum": {"usd": 3000}},
        ),
        APIEndpoint(
            name="coins_list",
            path="/coins/list",
            description="List all supported coins with id, name, and symbol",
            example_response=[{"id": "bitcoin", "symbol": "btc", "name": "Bitcoin"}],
        ),
        APIEndpoint(
            name="coin_data",
            path="/coins/{id}",
            description="Get detailed data for a specific coin",
            parameters=[
                APIParameter(name="id", required=True, description="Coin ID (e.g., bitcoin)"),
            ],
            query_params=[
                APIParameter(name="localization", type="boolean", description="Include localized languages", default=False),
                APIParameter(name="tickers", type="boolean", description="Include ticker data", default=True),
                APIParameter(name="market_data", type="boolean", description="Include market data", default=True),
                APIParameter(name="community_data", type="boolean", description="Include community data", default=True),
                APIParameter(name="developer_data", type="boolean", description="Include developer data", default=True),
            ],
            example_request={"pathParams": {"id": "bitcoin"}},
        ),
        APIEndpoint(
            name="coin_market_chart",
            path="/coins/{id}/market_chart",
            description="Get historical market data (price, market cap, volume) for a coin",
            parameters=[
                APIParameter(name="id", required=True, description="Coin ID (e.g., bitcoin)"),
            ],
            query_params=[
                APIParameter(name="vs_currency", required=True, description="Target currency (e.g., usd)"),
                APIParameter(name="days", required=True, description="Data up to X days ago (1, 7, 14, 30, 90, 180, 365, max)"),
            ],
            example_request={"pathParams": {"id": "bitcoin"}, "queryParams": {"vs_currency": "usd", "days": "7"}},
        ),
        APIEndpoint(
            name="trending",
            path="/search/trending",
            description="Get top 7 trending coins based on search volume in the last 24 hours",
            example_response={"coins": [{"item": {"id": "bitcoin", "name": "Bitcoin", "symbol": "btc"}}]},
        ),
        APIEndpoint(
            name="global",
            path="/global",
            description="Get cryptocurrency global market data",
            example_response={"data": {"total_market_cap": {"usd": 2000000000000}}},
        ),
    ],
)


# OpenWeatherMap - 天气（需要 API Key，通过 appid 查询参数传递）
OPENWEATHER = APIDefinition(
    id="openweather",
    name="OpenWeatherMap",
    description="Weather data API - current weather, forecasts, and historical data",
    base_url="https://api.openweathermap.org/data/2.5",
    requires_auth=True,
    auth_type=AuthType.QUERY,
    auth_query_param="appid",
    rate_limit=RateLimit(requests_per_minute=60, requests_per_day=1000),
    common_headers=JSON_ACCEPT,
    endpoints=[
        APIEndpoint(
            name="current_weather",
            path="/weather",
            description="Get current weather data for a city",
            query_params=[
                APIParameter(name="q", description="City name (e.g., London,UK)"),
                APIParameter(name="lat", type="number", description="Latitude"),
                APIParameter(name="lon", type="number", description="Longitude"),
                APIParameter(
                    name="units",
                    description="Units: standard, metric, imperial",
                    default="metric",
                    enum=["standard", "metric", "imperial"],
                ),
            ],
            example_request={"queryParams": {"q": "London,UK", "units": "metric"}},
            example_response={"main": {"temp": 15.5}, "weather": [{"description": "clear sky"}]},
        ),
        APIEndpoint(
            name="forecast",
            path="/forecast",
            description="Get 5-day weather forecast in 3-hour intervals",
            query_params=[
                APIParameter(name="q", description="City name (e.g., London,UK)"),
                APIParameter(name="lat", type="number", description="Latitude"),
                APIParameter(name="lon", type="number", description="Longitude"),
                APIParameter(name="units", description="Units: standard, metric, imperial", default="metric"),
                APIParameter(name="cnt", type="number", description="Number of timestamps to return (max 40)"),
            ],
            example_request={"queryParams": {"q": "London,UK", "units": "metric", "cnt": 8}},
        ),
    ],
)


# JSONPlaceholder - 测试用假数据 REST API
JSONPLACEHOLDER = APIDefinition(
    id="jsonplaceholder",
    name="JSONPlaceholder",
    description="Free fake REST API for testing and prototyping",
    base_url="https://jsonplaceholder.typicode.com",
    requires_auth=False,
    common_headers={"Content-Type": "application/json"},
    endpoints=[
        APIEndpoint(
            name="get_posts",
            path="/posts",
            description="Get all posts",
            query_params=[
                APIParameter(name="userId", type="number", description="Filter by user ID"),
            ],
        ),
        APIEndpoint(
            name="get_post",
            path="/posts/{id}",
            description="Get a specific post by ID",
            parameters=[
                APIParameter(name="id", type="number", required=True, description="Post ID"),
            ],
        ),
        APIEndpoint(
            name="create_post",
            path="/posts",
            method=HTTPMethod.POST,
            description="Create a new post",
            body_params=[
                APIParameter(name="title", required=True, description="Post title"),
                APIParameter(name="body", required=True, description="Post body"),
                APIParameter(name="userId", type="number", required=True, description="Author user ID"),
            ],
            example_request={"body": {"title": "Test Post", "body": "This is a test", "userId": 1}},
        ),
        APIEndpoint(
            name="get_users",
            path="/users",
            description="Get all users",
        ),
        APIEndpoint(
            name="get_user",
            path="/users/{id}",
            description="Get a specific user by ID",
            parameters=[
                APIParameter(name="id", type="number", required=True, description="User ID"),
            ],
        ),
    ],
)


# REST Countries - 国家信息
RESTCOUNTRIES = APIDefinition(
    id="restcountries",
    name="REST Countries",
    description="Get information about countries - capital, population, area, languages, currencies, and more",
    base_url="https://restcountries.com/v3.1",
    requires_auth=False,
    common_headers=JSON_ACCEPT,
    endpoints=[
        APIEndpoint(
            name="all_countries",
            path="/all",
            description="Get all countries",
            query_params=[
                APIParameter(name="fields", description="Filter fields (comma-separated): name,capital,population"),
            ],
        ),
        APIEndpoint(
            name="search_by_name",
            path="/name/{name}",
            description="Search countries by name",
            parameters=[
                APIParameter(name="name", required=True, description="Country name (full or partial)"),
            ],
            query_params=[
                APIParameter(name="fullText", type="boolean", description="Search by exact name match"),
            ],
            example_request={"pathParams": {"name": "united"}},
        ),
        APIEndpoint(
            name="search_by_code",
            path="/alpha/{code}",
            description="Search by country code (ISO 3166-1 alpha-2 or alpha-3)",
            parameters=[
                APIParameter(name="code", required=True, description="Country code (e.g., US, USA)"),
            ],
            example_request={"pathParams": {"code": "US"}},
        ),
        APIEndpoint(
            name="search_by_capital",
            path="/capital/{capital}",
            description="Search by capital city",
            parameters=[
                APIParameter(name="capital", required=True, description="Capital city name"),
            ],
            example_request={"pathParams": {"capital": "washington"}},
        ),
        APIEndpoint(
            name="search_by_region",
            path="/region/{region}",
            description="Search by region (Africa, Americas, Asia, Europe, Oceania)",
            parameters=[
                APIParameter(name="region", required=True, description="Region name"),
            ],
            example_request={"pathParams": {"region": "europe"}},
        ),
    ],
)


# GitHub - 公开仓库与用户（匿名访问）
GITHUB = APIDefinition(
    id="github",
    name="GitHub",
    description="GitHub repositories and users - public search and lookup",
    base_url="https://api.github.com",
    requires_auth=False,
    rate_limit=RateLimit(requests_per_minute=10),
    common_headers={"Accept": "application/vnd.github+json"},
    endpoints=[
        APIEndpoint(
            name="search_repositories",
            path="/search/repositories",
            description="Search GitHub repositories",
            query_params=[
                APIParameter(name="q", required=True, description="Search query, e.g., language:python stars:>100"),
                APIParameter(name="sort", description="Sort field (stars, forks, updated)", enum=["stars", "forks", "updated"]),
                APIParameter(name="per_page", type="number", description="Results per page (max 100)", default=30),
            ],
            example_request={"queryParams": {"q": "language:python stars:>1000", "sort": "stars"}},
        ),
        APIEndpoint(
            name="get_repository",
            path="/repos/{owner}/{repo}",
            description="Get a repository by owner and name",
            parameters=[
                APIParameter(name="owner", required=True, description="Repository owner"),
                APIParameter(name="repo", required=True, description="Repository name"),
            ],
            example_request={"pathParams": {"owner": "python", "repo": "cpython"}},
        ),
        APIEndpoint(
            name="get_user",
            path="/users/{username}",
            description="Get a public user profile",
            parameters=[
                APIParameter(name="username", required=True, description="GitHub username"),
            ],
            example_request={"pathParams": {"username": "octocat"}},
        ),
    ],
)


BUILTIN_APIS: List[APIDefinition] = [
    COINGECKO,
    OPENWEATHER,
    JSONPLACEHOLDER,
    RESTCOUNTRIES,
    GITHUB,
]


# ============================================================
# 精选子集：Capability 直调（apiId.endpointName）
# ============================================================

CURATED_APIS: List[APIDefinition] = [
    APIDefinition(
        id="coingecko",
        name="CoinGecko",
        description="Cryptocurrency prices and market data",
        base_url=COINGECKO.base_url,
        requires_auth=False,
        common_headers=JSON_ACCEPT,
        endpoints=[
            APIEndpoint(
                name="simple_price",
                path="/simple/price",
                description="Get current cryptocurrency prices",
                query_params=[
                    APIParameter(name="ids", required=True, description="Comma-separated crypto IDs (e.g., bitcoin,ethereum)"),
                    APIParameter(name="vs_currencies", required=True, description="Comma-separated fiat currencies (e.g., usd,eur)"),
                ],
            ),
        ],
    ),
    APIDefinition(
        id="openweather",
        name="OpenWeatherMap",
        description="Current weather and forecast data",
        base_url=OPENWEATHER.base_url,
        requires_auth=True,
        auth_type=AuthType.QUERY,
        auth_query_param="appid",
        common_headers=JSON_ACCEPT,
        endpoints=[
            APIEndpoint(
                name="current_weather",
                path="/weather",
                description="Get current weather for a city",
                query_params=[
                    APIParameter(name="q", required=True, description="City name (e.g., London)"),
                    APIParameter(name="units", description="Units: metric, imperial, standard"),
                ],
            ),
        ],
    ),
    APIDefinition(
        id="github",
        name="GitHub",
        description="GitHub repositories and users",
        base_url=GITHUB.base_url,
        requires_auth=False,
        common_headers=GITHUB.common_headers,
        endpoints=[
            APIEndpoint(
                name="search_repositories",
                path="/search/repositories",
                description="Search GitHub repositories",
                query_params=[
                    APIParameter(name="q", required=True, description="Search query, e.g., language:typescript stars:>100"),
                    APIParameter(name="sort", description="Sort field (stars, forks, updated)"),
                ],
            ),
        ],
    ),
]
