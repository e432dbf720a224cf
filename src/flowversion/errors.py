from enum import Enum


class VersionErrorType(str, Enum):
    REPOSITORY_UNAVAILABLE = "Repository unavailable"
    NO_MATCHING_TAG = "No matching tag"
    BRANCH_UNDETERMINED = "Branch undetermined"
    MALFORMED_BRANCH_VERSION = "No version in branch name"
    ARCHIVE_SNAPSHOT_MISSING = "Archive snapshot missing"
    CONFIGURATION = "Invalid configuration"


class FlowVersionError(Exception):
    error_type: VersionErrorType

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"{self.error_type.value}: {message}")


class RepositoryUnavailable(FlowVersionError):
    error_type = VersionErrorType.REPOSITORY_UNAVAILABLE


class NoMatchingTag(FlowVersionError):
    error_type = VersionErrorType.NO_MATCHING_TAG


class BranchUndetermined(FlowVersionError):
    error_type = VersionErrorType.BRANCH_UNDETERMINED


class MalformedBranchVersion(FlowVersionError):
    error_type = VersionErrorType.MALFORMED_BRANCH_VERSION


class ArchiveSnapshotMissing(FlowVersionError):
    error_type = VersionErrorType.ARCHIVE_SNAPSHOT_MISSING


class ConfigurationError(FlowVersionError):
    """Missing or invalid configuration. The only error that aborts resolution."""

    error_type = VersionErrorType.CONFIGURATION
