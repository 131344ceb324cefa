class DeploymentError(Exception):
    """
    Base for every failure that aborts a deployment run.

    Carries the identifier of the step that failed (``None`` when the failure is not tied
    to a single step) and the ledger of the steps confirmed before the failure, so that a
    run can be resumed by hand with a trimmed pipeline.
    """

    def __init__(self, message, module=None, ledger=None):
        super().__init__(message)
        self.module = module
        self.ledger = ledger


class UnresolvedReferenceError(DeploymentError):
    """A constructor argument names a module or constant that is not available yet."""

    def __init__(self, module, reference, ledger=None, kind="module"):
        super().__init__(
            f"{module} references {kind} '{reference}' which has not been resolved",
            module=module,
            ledger=ledger,
        )
        self.reference = reference
        self.kind = kind


class SubmissionError(DeploymentError):
    pass


class ConfirmationError(DeploymentError):
    pass


class DuplicateModuleError(DeploymentError):
    pass
