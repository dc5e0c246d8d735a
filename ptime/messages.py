# ptime/messages.py
"""Human-readable guidance for the auth error tokens shown on the sign-in screens."""
from typing import Optional

ROLE_LABELS = {
    "worker": "a worker",
    "employer": "a business owner",
}

SIGNIN_BUTTONS = {
    "worker": '"Get Started" or "I Already Have an Account"',
    "employer": '"Employer / Business Owner"',
}


def describe(token: str) -> Optional[str]:
    if token == "already_registered":
        return "An account already exists for this email, please sign in."
    if token == "no_account":
        return "No account found for this email, please sign up."
    if token.startswith("role_mismatch"):
        # role_mismatch_<declared>_is_<actual>
        actual = token.partition("_is_")[2]
        if actual in ROLE_LABELS:
            return (
                f"You're registered as {ROLE_LABELS[actual]}. "
                f"Please use the {SIGNIN_BUTTONS[actual]} button to sign in."
            )
        return (
            "This account is registered with a different role. "
            "Please contact support if you need to switch roles."
        )
    return None
