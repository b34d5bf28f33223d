"""Custom exception hierarchy for the publish tool.

Exit codes follow Unix conventions:
- 1: General error
- 2: Configuration error
- 3: Tool output error
- 5: Publish error
- 7: Registry error
"""


class PkgPublishError(Exception):
    """Base exception for all publish errors.

    All publish-related exceptions inherit from this class.
    Each subclass defines an exit_code for CLI error reporting.
    """

    exit_code: int = 1

    def __init__(
        self,
        message: str,
        details: str | None = None,
        fix_hint: str | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Brief error message
            details: Detailed explanation of what went wrong
            fix_hint: Suggested command or action to fix the issue
        """
        super().__init__(message)
        self.message = message
        self.details = details
        self.fix_hint = fix_hint

    def __str__(self) -> str:
        parts = [self.message]
        if self.details:
            parts.append(f"\nDetails: {self.details}")
        if self.fix_hint:
            parts.append(f"\nFix: {self.fix_hint}")
        return "".join(parts)


class ConfigurationError(PkgPublishError):
    """Configuration file errors.

    Raised when:
    - Config file has invalid syntax (YAML/TOML)
    - Config values fail validation
    """

    exit_code = 2


class ToolOutputError(PkgPublishError):
    """The package manager printed something that is not JSON.

    Never swallowed: an unparsable publish response can hide a real
    publish failure.
    """

    exit_code = 3

    def __init__(
        self,
        message: str,
        output: str,
        details: str | None = None,
        fix_hint: str | None = None,
    ) -> None:
        super().__init__(message, details=details, fix_hint=fix_hint)
        self.output = output


class PublishError(PkgPublishError):
    """Publishing failures.

    Raised when:
    - One or more packages failed to publish
    - A package directory has no usable package.json
    """

    exit_code = 5


class RegistryError(PkgPublishError):
    """Registry query failures the tool cannot reason about.

    Raised when `npm info` returns an error code other than E404. This
    aborts the whole run: "not published" and "registry broken" must
    never be confused.
    """

    exit_code = 7

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: str | None = None,
        fix_hint: str | None = None,
    ) -> None:
        super().__init__(message, details=details, fix_hint=fix_hint)
        self.code = code
