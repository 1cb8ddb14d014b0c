class AutomationError(Exception):
    """Base class for lifecycle automation errors."""


class UnknownJob(AutomationError):
    """Raised for a job or stage name the scheduler does not know."""


class InvalidRules(AutomationError):
    """Raised when a rule override fails validation."""

    def __init__(self, errors):
        self.errors = errors
        super().__init__(f'Invalid automation rules: {errors}')


class JobAlreadyRunning(AutomationError):
    """Raised when the run lock for a job is held by another invocation."""

    def __init__(self, job, run=None):
        self.job = job
        self.run = run
        super().__init__(f'Automation job "{job}" is already running')
