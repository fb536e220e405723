from __future__ import annotations

import json
import logging

from node_provisioner.logging_setup import JsonFormatter, configure_logging


def test_json_formatter_includes_event() -> None:
    record = logging.LogRecord(
        "node_provisioner.orchestrator", logging.INFO, __file__, 1, "state %s", ("fetching",), None
    )
    record.event = "install_state"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["msg"] == "state fetching"
    assert payload["event"] == "install_state"
    assert payload["logger"] == "node_provisioner.orchestrator"


def test_configure_logging_writes_json_file(tmp_path) -> None:
    logger = logging.getLogger("node_provisioner")
    saved = list(logger.handlers)
    logger.handlers.clear()
    try:
        log_file = tmp_path / "logs" / "provisioner.log"
        configure_logging(console=False, log_file=log_file)
        assert configure_logging(console=False, log_file=log_file) is logger
        assert len(logger.handlers) == 1

        logging.getLogger("node_provisioner.catalog").info("catalog loaded", extra={"event": "catalog_loaded"})
        for handler in logger.handlers:
            handler.flush()

        line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
        assert json.loads(line)["event"] == "catalog_loaded"
    finally:
        for handler in logger.handlers:
            handler.close()
        logger.handlers[:] = saved
