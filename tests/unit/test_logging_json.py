import logging

from factmarket.observability.logging import setup_logging


def test_setup_logging_json(capsys):
    setup_logging(level="INFO", json_output=True)
    logger = logging.getLogger("factmarket.test")
    logger.info("hello %s", "world", extra={"tx_id": "X1"})
    captured = capsys.readouterr().err.strip()
    assert captured.startswith("{") and captured.endswith("}")
    assert '"message": "hello world"' in captured
    assert '"tx_id": "X1"' in captured
