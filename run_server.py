import os

import uvicorn

from astrosyo.check_ollama import check_ollama
from astrosyo.config import settings
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="server")


def maybe_check_ollama() -> None:
    """
    Optionally run the Ollama preflight. Skipped when:
    - ASTROSYO_SKIP_OLLAMA_CHECK=true (useful in dev/tests)
    - ASTROSYO_NARRATION_ENABLED=false, since nothing will call the model.
    The required model is ASTROSYO_OLLAMA_MODEL.
    """
    if os.getenv("ASTROSYO_SKIP_OLLAMA_CHECK", "false").lower() in ("1", "true", "yes"):
        logger.info("Skipping Ollama preflight (ASTROSYO_SKIP_OLLAMA_CHECK=true)")
        return

    if not settings.narration_enabled:
        logger.info("Skipping Ollama preflight (narration disabled)")
        return

    required = [settings.ollama_model]
    try:
        check_ollama(required_models=required, auto_pull=None)
    except SystemExit:
        logger.error("Ollama preflight failed; set ASTROSYO_SKIP_OLLAMA_CHECK=true to bypass during dev/tests.")
        raise


if __name__ == "__main__":
    setup_logging(level=os.getenv("ASTROSYO_LOG_LEVEL", "INFO"), job_name="astrosyo")
    maybe_check_ollama()

    uvicorn.run(
        "astrosyo.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=False,
    )
