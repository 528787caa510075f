"""Top level branchwork exceptions"""


class BranchworkError(Exception):
    """Base for all branchwork errors"""


class UserResolvableError(BranchworkError):
    """An error which the user can probably solve"""

    def __init__(self, msg, suggested_fix=""):
        super().__init__(msg)
        self.msg = msg
        self.suggested_fix = suggested_fix

    def __str__(self):
        if type(self) == UserResolvableError:
            return f"{self.msg}\n\n{self.suggested_fix}".rstrip()
        else:
            return f"{self.__doc__}: {self.msg}\n\n{self.suggested_fix}".rstrip()


class UnexpectedError(BranchworkError):
    """An error which is unexpected and with no obvious solution"""

    def __init__(self, msg):
        super().__init__(msg)
        self.msg = msg

    def __str__(self):
        if type(self) == UnexpectedError:
            return self.msg
        else:
            return f"{self.__doc__}:\n{self.msg}"


## Engine


class InvalidStateError(UserResolvableError):
    """Engine is not in a resumable state"""


class CloneWhileRunningError(UserResolvableError):
    """Cannot clone an engine that is not suspended"""


class AsyncStepError(UserResolvableError):
    """Step needs awaiting"""


class ProtocolViolationError(UserResolvableError):
    """Body program broke the yield protocol"""


class ProgramError(UserResolvableError):
    """Badly formed body program"""


## History


class AtStartError(UserResolvableError):
    """Nothing to undo"""


class AtEndError(UserResolvableError):
    """Nothing to redo"""


## Driver


class BranchError(BranchworkError):
    """A branch raised an error"""

    def __init__(self, label, error):
        super().__init__(label, error)
        self.label = label
        self.error = error

    def __str__(self):
        return f"{self.__doc__} ({self.label}): {type(self.error).__name__}: {self.error}"
