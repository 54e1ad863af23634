"""Errors raised when talking to the platform or resolving linked resources."""

from __future__ import annotations


class RailwayError(Exception):
    """Base class for every error this package raises on purpose."""


class _FixedMessageError(RailwayError):
    default_message = ""

    def __init__(self) -> None:
        super().__init__(self.default_message)


class UnauthorizedError(_FixedMessageError):
    default_message = "Unauthorized. Please login with `railway login`"


class InvalidRailwayTokenError(_FixedMessageError):
    default_message = "Unauthorized"


class InvalidHeaderError(_FixedMessageError):
    default_message = "Login state is corrupt. Please logout and login back in."


class MissingResponseDataError(_FixedMessageError):
    default_message = "Failed to get data from GraphQL response"


class GraphQLError(RailwayError):
    """An error message returned by the GraphQL API."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class FetchError(RailwayError):
    """A request could not be completed."""

    def __init__(self, cause: object) -> None:
        super().__init__(f"Failed to fetch: {cause}")
        self.cause = cause


class NoLinkedProjectError(_FixedMessageError):
    default_message = "No linked project found. Run railway link to connect to a project"


class NoPersonalWorkspaceError(_FixedMessageError):
    default_message = (
        "Personal workspaces are no longer supported. "
        "Please specify a workspace by id or name"
    )


class ProjectNotFoundError(_FixedMessageError):
    default_message = "Project not found. Run `railway link` to connect to a project."


class ProjectDeletedError(_FixedMessageError):
    default_message = "Project is deleted. Run `railway link` to connect to a project."


class EnvironmentDeletedError(_FixedMessageError):
    default_message = (
        "Environment is deleted. Run `railway environment` to connect to an environment."
    )


class NoProjectsError(_FixedMessageError):
    default_message = "No projects found. Run `railway init` to create a new project"


class NoServicesError(_FixedMessageError):
    default_message = "Project does not have any services"


class EnvironmentNotFoundError(RailwayError):
    def __init__(self, environment: str) -> None:
        super().__init__(
            f'Environment "{environment}" not found.\n'
            "Run `railway environment` to connect to an environment."
        )
        self.environment = environment


class ProjectNotFoundInWorkspaceError(RailwayError):
    def __init__(self, project: str, workspace: str) -> None:
        super().__init__(
            f'Project "{project}" was not found in the "{workspace}" workspace.'
        )
        self.project = project
        self.workspace = workspace


class WorkspaceNotFoundError(RailwayError):
    def __init__(self, workspace: str) -> None:
        super().__init__(f'Workspace "{workspace}" not found.')
        self.workspace = workspace


class ServiceNotFoundError(RailwayError):
    def __init__(self, service: str) -> None:
        super().__init__(f'Service "{service}" not found.')
        self.service = service


class ProjectHasNoServicesError(_FixedMessageError):
    default_message = "Project has no services."


class NoServiceLinkedError(_FixedMessageError):
    default_message = "No service linked\nRun `railway service` to link a service"


class NoCommandProvidedError(_FixedMessageError):
    default_message = "No command provided. Run with `railway run <cmd>`"


class FailedToUploadError(RailwayError):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class VolumeNotFoundError(RailwayError):
    def __init__(self, volume: str) -> None:
        super().__init__(f"Volume {volume} not found.")
        self.volume = volume


class InvalidTwoFactorCodeError(_FixedMessageError):
    default_message = "2FA code is incorrect. Please try again."


class ConnectionVariableNotFoundError(RailwayError):
    def __init__(self, variable: str) -> None:
        super().__init__(
            "Could not find a variable to connect to the service with. "
            f'Looking for "{variable}".'
        )
        self.variable = variable


class InvalidConnectionVariableError(_FixedMessageError):
    default_message = "Connection URL should point to the Railway TCP proxy"


class RatelimitedError(_FixedMessageError):
    default_message = "You are being ratelimited. Please try again later"