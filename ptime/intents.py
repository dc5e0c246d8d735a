# ptime/intents.py
"""Single-use bookkeeping for OAuth intent tokens, keyed by their nonce."""
import logging
from typing import Dict

from .db import OAUTH_INTENTS, run
from .errors import Conflict, InvalidIntent
from .profiles import now_iso

log = logging.getLogger("uvicorn.error")


def consume(sb, intent: Dict[str, str]) -> None:
    """Mark the intent used; a nonce seen before means the state is being replayed."""
    now = now_iso()
    # a row is only needed while its token could still verify
    run(sb.table(OAUTH_INTENTS).delete().lt("expires_at", now), "oauth_intents purge")
    try:
        run(
            sb.table(OAUTH_INTENTS).insert({
                "nonce": intent["nonce"],
                "expires_at": intent["expires_at"],
                "used_at": now,
            }),
            "oauth_intents insert",
        )
    except Conflict:
        log.warning("replayed sign-in state %s", intent["nonce"])
        raise InvalidIntent("Sign-in request was already used, please start again")
