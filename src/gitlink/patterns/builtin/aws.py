"""AWS credential patterns."""

from gitlink.patterns.models import SecretPattern

AWS_ACCESS_KEY = SecretPattern(
    id="AWS_ACCESS_KEY",
    name="AWS Access Key",
    description="AWS access key IDs (AKIA prefix, 20 characters).",
    pattern=r"\bAKIA[0-9A-Z]{16}\b",
)

AWS_SECRET_KEY = SecretPattern(
    id="AWS_SECRET_KEY",
    name="AWS Secret Key",
    description="AWS secret access keys assigned to a recognisable variable.",
    pattern=(
        r"(?i)\b(?:aws_secret_access_key|aws_secret_key|secret_access_key)\b"
        r"\s*[:=]\s*['\"](?P<secret>[A-Za-z0-9/+]{40})['\"]"
    ),
)

ALL_AWS_PATTERNS = [AWS_ACCESS_KEY, AWS_SECRET_KEY]
