# ptime/reconcile.py
"""
Bridge a verified Supabase identity to a PTime profile.

The caller declares what it meant to do before the OAuth redirect (an intent:
`signup` or `signin`, plus the role it chose). Every rejection ends the
provider session before raising, so a page reload never finds a signed-in
user without a matching profile.
"""
import logging
from typing import Any, Dict

from . import intents, profiles
from .auth import ExternalIdentity, decode_intent_token, sign_out_external
from .config import Settings
from .errors import AlreadyRegistered, Conflict, NoAccount, PTimeError, RoleMismatch, Unauthenticated, UpstreamFailure

log = logging.getLogger("uvicorn.error")


def signup(sb, identity: ExternalIdentity, role: str) -> Dict[str, Any]:
    if profiles.get_by_email(sb, identity.email):
        log.info("signup rejected, %s already registered", identity.email)
        raise AlreadyRegistered("An account already exists for this email")

    try:
        profile = profiles.create(sb, identity.id, identity.email, role)
    except Conflict:
        log.info("signup rejected, %s registered concurrently", identity.email)
        raise AlreadyRegistered("An account already exists for this email")
    try:
        profiles.create_role_record(sb, role, profile["id"], profile["email"])
    except UpstreamFailure:
        log.error("%s record failed for %s, removing profile", role, profile["id"])
        try:
            profiles.delete(sb, profile["id"])
        except UpstreamFailure:
            log.error("compensating delete failed, profile %s has no %s record", profile["id"], role)
        raise UpstreamFailure("Could not finish creating the account")

    log.info("signed up %s as %s", profile["email"], role)
    return profile


def signin(sb, identity: ExternalIdentity, role: str) -> Dict[str, Any]:
    profile = profiles.get_by_email(sb, identity.email)
    if not profile:
        log.info("signin rejected, no account for %s", identity.email)
        raise NoAccount("No account found for this email")
    if profile["role"] != role:
        log.warning("signin rejected, %s declared %s but is %s", identity.email, role, profile["role"])
        raise RoleMismatch(role, profile["role"])
    return profile


def reconcile(sb, identity: ExternalIdentity, mode: str, role: str, email: str = "") -> Dict[str, Any]:
    """Run the intent against the profile store and return the accepted profile."""
    try:
        if email and profiles.normalize_email(email) != profiles.normalize_email(identity.email):
            raise Unauthenticated("Email does not match the signed-in account")
        if mode == "signup":
            return signup(sb, identity, role)
        return signin(sb, identity, role)
    except PTimeError:
        sign_out_external(sb, identity)
        raise


def reconcile_state(sb, settings: Settings, identity: ExternalIdentity, state: str) -> Dict[str, Any]:
    """OAuth callback: verify and use up the intent carried in `state`, then reconcile it."""
    try:
        intent = decode_intent_token(settings, state)
        intents.consume(sb, intent)
    except PTimeError:
        sign_out_external(sb, identity)
        raise
    return reconcile(sb, identity, intent["mode"], intent["role"])
