"""Top level stackgraph exceptions"""


class StackgraphError(Exception):
    """Base for all stackgraph errors"""


class UserResolvableError(StackgraphError):
    """An error which the user can probably solve"""

    def __init__(self, msg, suggested_fix):
        super().__init__(msg)
        self.msg = msg
        self.suggested_fix = suggested_fix

    def __str__(self):
        if type(self) == UserResolvableError:
            return f"{self.msg}\n\n{self.suggested_fix}"
        else:
            return f"{self.__doc__}: {self.msg}\n\n{self.suggested_fix}"


class UnexpectedError(StackgraphError):
    """An error which is unexpected and with no obvious solution"""

    def __init__(self, msg):
        super().__init__(msg)
        self.msg = msg

    def __str__(self):
        if type(self) == UnexpectedError:
            return self.msg
        else:
            return f"{self.__doc__}:\n{self.msg}"


class ConfigError(UserResolvableError):
    """Invalid configuration"""


class IdentityResolutionError(UserResolvableError):
    """Could not resolve the deployer identity"""


class DeclarationError(UnexpectedError):
    """Invalid resource declaration"""
