import unittest

import httpx

from portfolio_quotes.integrations.alpha_vantage import AlphaVantageClient
from portfolio_quotes.schemas.quote import FailureKind, ProviderFailure, Quote


class TestAlphaVantageClient(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.requests: list[httpx.Request] = []
        self.response = httpx.Response(200, json={})

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            if isinstance(self.response, Exception):
                raise self.response
            return self.response

        self.session = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        self.client = AlphaVantageClient(
            api_key="av-key",
            base_url="https://example.test",
            session=self.session,
        )

    async def asyncTearDown(self):
        await self.session.aclose()

    async def test_global_quote_is_parsed(self):
        self.response = httpx.Response(
            200,
            json={
                "Global Quote": {
                    "01. symbol": "AAPL",
                    "05. price": "150.2500",
                    "09. change": "-1.2500",
                    "10. change percent": "-0.8251%",
                }
            },
        )

        result = await self.client.fetch_quote("AAPL")

        self.assertIsInstance(result, Quote)
        self.assertEqual(result.symbol, "AAPL")
        self.assertEqual(result.price, 150.25)
        self.assertEqual(result.change, -1.25)
        self.assertAlmostEqual(result.change_percent, -0.8251)
        self.assertEqual(result.source, "alpha-vantage")

        params = self.requests[0].url.params
        self.assertEqual(self.requests[0].url.path, "/query")
        self.assertEqual(params["function"], "GLOBAL_QUOTE")
        self.assertEqual(params["symbol"], "AAPL")
        self.assertEqual(params["apikey"], "av-key")

    async def test_error_message_is_transport_error(self):
        self.response = httpx.Response(200, json={"Error Message": "Invalid API call."})

        result = await self.client.fetch_quote("NOPE")

        self.assertIsInstance(result, ProviderFailure)
        self.assertEqual(result.kind, FailureKind.TRANSPORT_ERROR)
        self.assertEqual(result.detail, "Invalid API call.")

    async def test_frequency_note_is_rate_limited(self):
        self.response = httpx.Response(
            200,
            json={"Note": "Thank you for using Alpha Vantage! Our standard API call frequency is 5 calls per minute."},
        )

        result = await self.client.fetch_quote("AAPL")

        self.assertEqual(result.kind, FailureKind.RATE_LIMITED)

    async def test_rate_limit_information_is_rate_limited(self):
        self.response = httpx.Response(
            200,
            json={"Information": "We have detected your API key and our standard API rate limit is 25 requests per day."},
        )

        result = await self.client.fetch_quote("AAPL")

        self.assertEqual(result.kind, FailureKind.RATE_LIMITED)

    async def test_other_information_is_no_data(self):
        self.response = httpx.Response(200, json={"Information": "Please visit our premium page."})

        result = await self.client.fetch_quote("AAPL")

        self.assertEqual(result.kind, FailureKind.NO_DATA)

    async def test_empty_global_quote_is_no_data(self):
        self.response = httpx.Response(200, json={"Global Quote": {}})

        result = await self.client.fetch_quote("ZZZZ")

        self.assertEqual(result.kind, FailureKind.NO_DATA)

    async def test_http_429_is_rate_limited(self):
        self.response = httpx.Response(429, json={})

        result = await self.client.fetch_quote("AAPL")

        self.assertEqual(result.kind, FailureKind.RATE_LIMITED)

    async def test_server_error_is_transport_error(self):
        self.response = httpx.Response(503, text="unavailable")

        result = await self.client.fetch_quote("AAPL")

        self.assertEqual(result.kind, FailureKind.TRANSPORT_ERROR)

    async def test_connection_error_does_not_raise(self):
        self.response = httpx.ConnectError("connection refused")

        result = await self.client.fetch_quote("AAPL")

        self.assertEqual(result.kind, FailureKind.TRANSPORT_ERROR)

    async def test_timeout_does_not_raise(self):
        self.response = httpx.ReadTimeout("too slow")

        result = await self.client.fetch_quote("AAPL")

        self.assertEqual(result.kind, FailureKind.TRANSPORT_ERROR)
        self.assertIn("timeout", result.detail)

    async def test_invalid_json_is_transport_error(self):
        self.response = httpx.Response(200, content=b"<html>not json</html>")

        result = await self.client.fetch_quote("AAPL")

        self.assertEqual(result.kind, FailureKind.TRANSPORT_ERROR)

    async def test_missing_api_key_skips_network(self):
        client = AlphaVantageClient(api_key=None, base_url="https://example.test", session=self.session)

        result = await client.fetch_quote("AAPL")

        self.assertEqual(result.kind, FailureKind.TRANSPORT_ERROR)
        self.assertEqual(result.detail, "API_KEY_MISSING")
        self.assertEqual(self.requests, [])


if __name__ == "__main__":
    unittest.main()
