class EvobotsError(Exception):
    """Base for all evobots exceptions."""

    pass


class RecipeError(EvobotsError):
    """A recipe could not be parsed."""

    pass


class InvariantError(EvobotsError):
    """A structural contract was broken by a genome, game or caller."""

    pass


class ConfigError(EvobotsError):
    """Invalid run configuration."""

    pass


class StoreError(EvobotsError):
    """Recipe store failures."""

    pass
