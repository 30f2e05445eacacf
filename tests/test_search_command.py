import asyncio
import random
import time

import pytest

from picbot.bus.emitter import EventEmitter
from picbot.bus.events import CommandEvent, OutboundMessage
from picbot.commands.search import SearchCommand, SearchState
from picbot.config.schema import SearchConfig
from picbot.formatter import DefaultFormatter
from picbot.search.client import SearchError
from picbot.search.models import ImageHit, SearchPage
from picbot.shortening.coordinator import ShortenSink

ALL_EVENT = "url.shorting.all"


class FakeSearchClient:
    def __init__(self, page: SearchPage | None = None, error: SearchError | None = None):
        self.page = page or SearchPage()
        self.error = error
        self.calls: list[dict] = []

    async def search(self, **kwargs) -> SearchPage:
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return self.page


def _page(*ids: str) -> SearchPage:
    images = [
        ImageHit(id=i, title=f"Title {i}", small_thumb=f"http://small/{i}", large_thumb=f"http://large/{i}")
        for i in ids
    ]
    return SearchPage(images=images, items=len(images), total_items=len(images))


def _event(*params: str, targets: list[str] | None = None) -> CommandEvent:
    return CommandEvent(
        name="search",
        params=list(params),
        channel="irc",
        source="alice",
        targets=targets or ["#chan"],
    )


def _make_command(
    client: FakeSearchClient,
    *,
    emitter: EventEmitter | None = None,
    config: SearchConfig | None = None,
    formatter=None,
) -> tuple[SearchCommand, list[OutboundMessage]]:
    sent: list[OutboundMessage] = []

    async def _send(msg: OutboundMessage) -> None:
        sent.append(msg)

    command = SearchCommand(
        config or SearchConfig(account_id="ACCOUNT"),
        emitter or EventEmitter(),
        _send,
        formatter=formatter,
        client=client,
        rng=random.Random(0),
    )
    return command, sent


def test_missing_account_id_fails_fast() -> None:
    async def _send(msg: OutboundMessage) -> None:
        pass

    with pytest.raises(ValueError, match="accountId"):
        SearchCommand(SearchConfig(), EventEmitter(), _send)


@pytest.mark.parametrize("formatter", [object(), "%title%", 42])
def test_invalid_formatter_fails_fast(formatter) -> None:
    async def _send(msg: OutboundMessage) -> None:
        pass

    with pytest.raises(TypeError, match="formatter"):
        SearchCommand(SearchConfig(account_id="ACCOUNT"), EventEmitter(), _send, formatter=formatter)


def test_template_config_builds_default_formatter() -> None:
    command, _ = _make_command(FakeSearchClient(), config=SearchConfig(account_id="A", template="%id%"))

    assert isinstance(command.formatter, DefaultFormatter)
    assert command.formatter.pattern == "%id%"


def test_subscribed_commands() -> None:
    command, _ = _make_command(FakeSearchClient())

    assert set(command.subscribed_commands()) == {"search", "search.help"}


@pytest.mark.asyncio
async def test_empty_query_replies_with_help_without_searching() -> None:
    client = FakeSearchClient(_page("1"))
    command, sent = _make_command(client)

    request = await command.handle(_event())

    assert client.calls == []
    assert request.state == SearchState.REPLIED
    assert [m.content for m in sent] == [
        "Usage: search queryString",
        "queryString - the search query (all words are assumed to be part of message)",
        "Searches Bigstock for an image based on the provided query string.",
    ]


@pytest.mark.asyncio
async def test_help_command_replies_with_help() -> None:
    command, sent = _make_command(FakeSearchClient())

    await command.handle_help(_event())

    assert len(sent) == 3
    assert sent[0].content.startswith("Usage:")


@pytest.mark.asyncio
async def test_search_request_parameters() -> None:
    client = FakeSearchClient(_page("1"))
    command, _ = _make_command(client)

    await command.handle(_event("cute", "kittens"))

    assert client.calls == [
        {"query": "cute kittens", "limit": 10, "thumb_sizes": ["large_thumb", "small_thumb"]}
    ]


@pytest.mark.asyncio
async def test_zero_images_replies_with_apology() -> None:
    command, sent = _make_command(FakeSearchClient(_page()))

    request = await command.handle(_event("nothing"))

    assert [m.content for m in sent] == [SearchCommand.NO_RESULTS_MESSAGE]
    assert request.image is None
    assert request.state == SearchState.REPLIED


@pytest.mark.asyncio
async def test_error_status_replies_with_apology_without_detail() -> None:
    error = SearchError("search API responded with 403", status_code=403, detail="Invalid account SECRET")
    command, sent = _make_command(FakeSearchClient(error=error))

    await command.handle(_event("cat"))

    assert [m.content for m in sent] == [SearchCommand.NO_RESULTS_MESSAGE]
    assert "SECRET" not in sent[0].content
    assert "403" not in sent[0].content


@pytest.mark.asyncio
async def test_transport_failure_replies_with_api_apology() -> None:
    error = SearchError("search request failed: refused", detail="refused")
    command, sent = _make_command(FakeSearchClient(error=error))

    await command.handle(_event("cat"))

    assert [m.content for m in sent] == [SearchCommand.API_ERROR_MESSAGE]


@pytest.mark.asyncio
async def test_successful_shortening_is_used_in_reply() -> None:
    emitter = EventEmitter()
    received: list[str] = []

    def _listener(url: str, sink: ShortenSink) -> None:
        received.append(url)
        sink.resolve("http://short/42")

    emitter.on(ALL_EVENT, _listener)
    command, sent = _make_command(FakeSearchClient(_page("42")), emitter=emitter)

    request = await command.handle(_event("cat"))

    assert received == ["http://www.bigstockphoto.com/image-42"]
    assert [m.content for m in sent] == ["Title 42 - http://short/42 < http://large/42 >"]
    assert request.image is not None
    assert request.image.url_short == "http://short/42"


@pytest.mark.asyncio
async def test_timed_out_shortening_falls_back_to_long_url() -> None:
    emitter = EventEmitter()
    emitter.on(ALL_EVENT, lambda url, sink: None)
    config = SearchConfig(account_id="ACCOUNT", shorten_timeout=0.1)
    command, sent = _make_command(FakeSearchClient(_page("7")), emitter=emitter, config=config)

    started = time.monotonic()
    request = await command.handle(_event("cat"))
    elapsed = time.monotonic() - started

    assert [m.content for m in sent] == [
        "Title 7 - http://www.bigstockphoto.com/image-7 < http://large/7 >"
    ]
    assert request.image is not None
    assert request.image.url_short is None
    assert elapsed < 1.0


@pytest.mark.asyncio
async def test_no_shortener_still_replies() -> None:
    command, sent = _make_command(FakeSearchClient(_page("9")))

    await command.handle(_event("cat"))

    assert [m.content for m in sent] == [
        "Title 9 - http://www.bigstockphoto.com/image-9 < http://large/9 >"
    ]


@pytest.mark.asyncio
async def test_canonical_url_is_rebuilt_from_template() -> None:
    config = SearchConfig(account_id="ACCOUNT", image_url_template="https://img.example/{id}.html")
    command, sent = _make_command(
        FakeSearchClient(_page("5")),
        config=config,
        formatter=DefaultFormatter("%url%"),
    )

    await command.handle(_event("cat"))

    assert [m.content for m in sent] == ["https://img.example/5.html"]


@pytest.mark.asyncio
async def test_reply_goes_to_every_target() -> None:
    command, sent = _make_command(FakeSearchClient(_page("3")))

    await command.handle(_event("cat", targets=["#a", "#b"]))

    assert [m.chat_id for m in sent] == ["#a", "#b"]
    assert all(m.channel == "irc" for m in sent)


@pytest.mark.asyncio
async def test_selection_uses_injected_rng() -> None:
    page = _page("a", "b", "c", "d")
    expected = random.Random(0).choice(page.images)
    command, sent = _make_command(FakeSearchClient(page), formatter=DefaultFormatter("%id%"))

    await command.handle(_event("cat"))

    assert [m.content for m in sent] == [expected.id]


@pytest.mark.asyncio
async def test_shortening_waits_for_search_and_formatting_waits_for_shortening() -> None:
    emitter = EventEmitter()
    order: list[str] = []
    loop = asyncio.get_running_loop()

    class _OrderedClient(FakeSearchClient):
        async def search(self, **kwargs) -> SearchPage:
            order.append("search")
            return await super().search(**kwargs)

    class _OrderedFormatter(DefaultFormatter):
        def format(self, image) -> str:
            order.append("format")
            return super().format(image)

    def _listener(url: str, sink: ShortenSink) -> None:
        order.append("shorten")
        loop.call_later(0.01, sink.resolve, "http://short/x")

    emitter.on(ALL_EVENT, _listener)
    command, _ = _make_command(_OrderedClient(_page("1")), emitter=emitter, formatter=_OrderedFormatter())

    await command.handle(_event("cat"))

    assert order == ["search", "shorten", "format"]


@pytest.mark.asyncio
async def test_concurrent_requests_are_independent() -> None:
    emitter = EventEmitter()
    loop = asyncio.get_running_loop()

    def _listener(url: str, sink: ShortenSink) -> None:
        if url.endswith("-1"):
            loop.call_later(0.01, sink.resolve, "http://short/1")

    emitter.on(ALL_EVENT, _listener)
    config = SearchConfig(account_id="ACCOUNT", shorten_timeout=0.05)
    command_a, sent_a = _make_command(
        FakeSearchClient(_page("1")), emitter=emitter, config=config, formatter=DefaultFormatter("%url_short%")
    )
    command_b, sent_b = _make_command(
        FakeSearchClient(_page("2")), emitter=emitter, config=config, formatter=DefaultFormatter("%url_short%")
    )

    await asyncio.gather(command_a.handle(_event("a")), command_b.handle(_event("b")))

    assert [m.content for m in sent_a] == ["http://short/1"]
    assert [m.content for m in sent_b] == ["http://www.bigstockphoto.com/image-2"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"data": {"paging": {"items": "n/a"}, "images": []}},
    ],
)
async def test_malformed_search_body_replies_with_apology(monkeypatch, payload) -> None:
    class _Response:
        status_code = 200

        def json(self):
            return payload

    class StubClient:
        async def __aenter__(self):
            return self

        async def __aexit__(self, exc_type, exc, tb):
            return False

        async def get(self, url, params=None, timeout=None):
            return _Response()

    monkeypatch.setattr("picbot.search.client.httpx.AsyncClient", StubClient)
    sent: list[OutboundMessage] = []

    async def _send(msg: OutboundMessage) -> None:
        sent.append(msg)

    command = SearchCommand(SearchConfig(account_id="ACCOUNT"), EventEmitter(), _send)

    request = await command.handle(_event("cat"))

    assert [m.content for m in sent] == [SearchCommand.NO_RESULTS_MESSAGE]
    assert request.state == SearchState.REPLIED
