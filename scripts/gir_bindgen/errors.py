"""
Error types

Configuration errors end a generation run. They are raised where the
offending configuration value is known and collected by the pipeline
driver, which reports all of them before stopping.
"""

from typing import Iterable


class ConfigError(Exception):
    """A preprocessor or filter configuration entry is invalid"""

    def __init__(self, message: str, value: str = ''):
        super().__init__(message)
        self.value = value


class UnversionedTypeError(ConfigError):
    """A GIR type was given without a versioned namespace"""


class WrongKindError(ConfigError):
    """A resolved node has the wrong kind for the requested operation"""


class CallableNotFoundError(ConfigError):
    """No callable matches a dotted member path"""


class ParameterNotFoundError(ConfigError):
    """A callable has no parameter with the requested name"""


class NameCollisionError(ConfigError):
    """A rename would give two declarations of a namespace the same name"""


class InvalidSelectorError(ConfigError):
    """A signal selector or filter string has the wrong shape"""


class RepositoryError(Exception):
    """A repository document could not be loaded or indexed"""


class PipelineError(Exception):
    """One or more hard errors occurred while applying the configuration"""

    def __init__(self, errors: Iterable[ConfigError]):
        self.errors = list(errors)
        lines = [f'{len(self.errors)} configuration error(s):']
        lines.extend(f'  {err} ({err.value!r})' if err.value else f'  {err}'
                     for err in self.errors)
        super().__init__('\n'.join(lines))
