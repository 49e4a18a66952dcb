"""Token patterns — vendor tokens with fixed prefixes, JWTs, generic assignments."""

from gitlink.patterns.models import SecretPattern

GITHUB_TOKEN = SecretPattern(
    id="GITHUB_TOKEN",
    name="GitHub Token",
    description="GitHub personal access tokens (ghp_ prefix, 36 characters).",
    pattern=r"\bghp_[A-Za-z0-9]{36}\b",
)

GITLAB_TOKEN = SecretPattern(
    id="GITLAB_TOKEN",
    name="GitLab Token",
    description="GitLab personal access tokens (glpat- prefix).",
    pattern=r"\bglpat-[A-Za-z0-9_\-]{20,}",
)

SLACK_TOKEN = SecretPattern(
    id="SLACK_TOKEN",
    name="Slack Token",
    description="Slack bot/user/workspace tokens.",
    pattern=r"\bxox[bporsa]-[0-9]{10,13}-[0-9]{10,13}[A-Za-z0-9\-]*",
)

STRIPE_SECRET_KEY = SecretPattern(
    id="STRIPE_SECRET_KEY",
    name="Stripe Secret Key",
    description="Stripe live secret keys (sk_live_ prefix).",
    pattern=r"\bsk_live_[A-Za-z0-9]{24,}\b",
)

JWT = SecretPattern(
    id="JWT",
    name="JWT Token",
    description="JSON Web Tokens (three base64url segments, eyJ header).",
    pattern=r"\beyJ[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]{10,}\b",
)

# Matches api_key, api_key2, apikey_prod, token, secret_value, auth_key ...
GENERIC_API_KEY = SecretPattern(
    id="GENERIC_API_KEY",
    name="Generic API Key / Token",
    description="Quoted assignments of 20+ characters to key/token/secret names.",
    pattern=(
        r"(?i)\b(?:api[_-]?key\w*|token\w*|secret\w*|auth[_-]?key\w*)\b"
        r"\s*[:=]\s*['\"](?P<secret>[A-Za-z0-9_\-]{20,})['\"]"
    ),
)

ALL_VENDOR_TOKEN_PATTERNS = [
    GITHUB_TOKEN,
    GITLAB_TOKEN,
    SLACK_TOKEN,
    STRIPE_SECRET_KEY,
    JWT,
]
