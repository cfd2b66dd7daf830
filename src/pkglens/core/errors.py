"""Exception hierarchy for pkglens."""

from __future__ import annotations

from typing import Any, Self

# Exit Codes
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1
EXIT_SYSTEM_ERROR = 2
EXIT_TRANSIENT_ERROR = 3


class PkgError(Exception):
    """Base exception class with context propagation.

    All exceptions raised by pkglens inherit from this class.
    Context is a dictionary that accumulates relevant information
    as the exception propagates up the call stack.

    Example:
        raise PkgError("An error occurred", context={"package": "vlc"})

        # Or with context propagation
        try:
            ...
        except PkgError as e:
            raise e.with_context(operation="install", backend="dnf")
    """
    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def with_context(self, **new_context: Any) -> Self:
        """Merge additional context into this exception and return it.

        Args:
            **new_context: Additional context to add to the exception.

        Returns:
            The same exception instance with merged context.
        """
        self.context.update(new_context)
        return self

    def __str__(self) -> str:
        """String representation of the exception including context."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} [{context_str}]"
        return self.message


class TransientError(PkgError):
    """Errors caused by conditions outside our control that may clear up.

    A package manager that is locked by another process, a mirror that
    is temporarily unreachable or a command that ran too long all land here.
    """
    pass


class UserError(PkgError):
    """Errors caused by user actions or inputs.

    These should not be retried without the user changing something.
    """
    pass


class SystemError(PkgError):
    """Errors due to the host environment.

    Missing package managers, unreadable system files and similar
    problems that need a fix on the machine itself.
    """
    pass


## Specific Exceptions ##

class ExecutionError(TransientError):
    """An external command could not be launched or exited non-zero.

    Adapters decide whether a given non-zero exit means "no results";
    everything else reaches the catalog or the tools as this error.
    """
    def __init__(
        self,
        message: str | None = None,
        command: str | None = None,
        returncode: int | None = None,
        error: str | None = None,
        context: dict[str, Any] | None = None
    ) -> None:
        """Initialise ExecutionError with detailed context.

        Args:
            message: Optional custom error message.
            command: The command line that was executed.
            returncode: The exit code returned by the command, if it ran.
            error: Output captured from the command, or the launch failure.
            context: Additional context information.
        """
        ctx = context or {}
        if command:
            ctx["command"] = command
        if returncode is not None:
            ctx["returncode"] = returncode
        if error:
            ctx["error"] = error

        if message is None:
            if returncode is None:
                message = f"Could not run {command or 'command'}"
            else:
                message = f"Command failed with exit code {returncode}"

        self.returncode = returncode
        super().__init__(message, context=ctx)


class CommandTimeoutError(ExecutionError):
    """A command was killed after exceeding its timeout."""
    def __init__(
        self,
        message: str | None = None,
        command: str | None = None,
        timeout: float | None = None,
        context: dict[str, Any] | None = None
    ) -> None:
        ctx = context or {}
        if timeout is not None:
            ctx["timeout"] = timeout

        if message is None:
            message = f"Command timed out after {timeout or 'unknown'}s"

        super().__init__(message, command=command, context=ctx)


class DetectionFailure(SystemError):
    """No supported native package manager was found on this host.

    Tools turn this into a soft "no supported package manager" message.
    """
    def __init__(self, message: str | None = None, context: dict[str, Any] | None = None) -> None:
        super().__init__(
            message or "No supported native package manager detected on this system.",
            context=context,
        )


class ParseAnomaly(PkgError):
    """A row of command output did not match the expected grammar.

    Parsers drop such rows instead of raising; the class exists so that
    callers parsing a single mandatory value have something to raise.
    """
    pass


class UnsupportedOperation(UserError):
    """The requested operation is not available for this backend.

    This is never masked as an empty result.
    """
    def __init__(
        self,
        message: str | None = None,
        operation: str | None = None,
        backend: str | None = None,
        context: dict[str, Any] | None = None
    ) -> None:
        ctx = context or {}
        if operation:
            ctx["operation"] = operation
        if backend:
            ctx["backend"] = backend

        if message is None:
            message = f"Operation '{operation or 'unknown'}' is not supported by {backend or 'this backend'}"

        super().__init__(message, context=ctx)


# CLI Error Message Templates

ERROR_TEMPLATES = {
    CommandTimeoutError: (
        "⚠️ Command timed out after {timeout}s: {command}\n"
        "   Raise PKGLENS_COMMAND_TIMEOUT or try again later"
    ),
    ExecutionError: (
        "⚠️ Command failed: {command}\n"
        "   Exit Code: {returncode}\n"
        "   Error: {error}"
    ),
    DetectionFailure: (
        "❌ {message}\n"
        "   Supported: dnf, apt, pacman, zypper (plus flatpak)"
    ),
    UnsupportedOperation: (
        "❌ {message}"
    ),
    TransientError: (
        "⚠️ Temporary failure: {message}\n"
        "   This may resolve itself - try again in a moment"
    ),
    UserError: (
        "❌ {message}"
    ),
    SystemError: (
        "⚠️ System error: {message}\n"
        "   Please check your system configuration and try again"
    ),
    PkgError: (
        "❌ {message}"
    ),
}


def format_error_message(error: PkgError) -> str:
    """Format an error message for CLI display based on the error type.

    Args:
        error: The PkgError instance to format.

    Returns:
        A formatted string message for CLI display.
    """
    template = ERROR_TEMPLATES.get(type(error), ERROR_TEMPLATES[PkgError])
    try:
        return template.format(message=error.message, **error.context)
    except KeyError:
        return f"❌ {error.message}"
