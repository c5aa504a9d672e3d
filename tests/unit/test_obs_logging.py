import json
import logging

from wordguard.obs.logging import InfoSamplingFilter, JSONLogFormatter


def _record(level: int = logging.INFO, **extra) -> logging.LogRecord:
	record = logging.LogRecord("wordguard.test", level, __file__, 1, "checked %s", ("item",), None)
	for key, value in extra.items():
		setattr(record, key, value)
	return record


def test_json_formatter_emits_structured_payload() -> None:
	payload = json.loads(JSONLogFormatter().format(_record(count=3, tier="high")))

	assert payload["msg"] == "checked item"
	assert payload["level"] == "info"
	assert payload["logger"] == "wordguard.test"
	assert payload["count"] == 3
	assert payload["tier"] == "high"
	assert {"ts", "service", "env", "commit"} <= payload.keys()


def test_json_formatter_redacts_user_content() -> None:
	payload = json.loads(JSONLogFormatter().format(_record(content="some private text", terms=["badword"])))

	assert payload["content"] == "[redacted]"
	assert payload["terms"] == "[redacted]"


def test_json_formatter_truncates_long_collections() -> None:
	payload = json.loads(JSONLogFormatter().format(_record(ids=list(range(25)))))

	assert len(payload["ids"]) == 11
	assert payload["ids"][-1] == "…"


def test_info_sampling_keeps_warnings() -> None:
	sampler = InfoSamplingFilter(rate=0.0)

	assert sampler.filter(_record(logging.INFO)) is False
	assert sampler.filter(_record(logging.WARNING)) is True
	assert sampler.filter(_record(logging.ERROR)) is True
	assert InfoSamplingFilter(rate=1.0).filter(_record(logging.INFO)) is True


def test_init_installs_json_handler_once(monkeypatch) -> None:
	from wordguard import obs

	root = logging.getLogger()
	saved_handlers, saved_level = list(root.handlers), root.level
	monkeypatch.setattr(obs, "_initialised", False)
	try:
		obs.init()
		installed = list(root.handlers)
		obs.init()

		assert len(installed) == 1
		assert isinstance(installed[0].formatter, JSONLogFormatter)
		assert any(isinstance(f, InfoSamplingFilter) for f in installed[0].filters)
		assert root.handlers == installed
	finally:
		root.handlers[:] = saved_handlers
		root.setLevel(saved_level)
