class WebhookError(Exception):
    """Base error for webhook processing."""


class SignatureVerificationFailed(WebhookError):
    """Stripe signature missing, mismatched, or payload unreadable."""


class AccountNotFoundError(WebhookError):
    def __init__(self, lookup: str, value: str | None):
        self.lookup = lookup
        self.value = value
        super().__init__(f"No account found for {lookup}={value!r}")
