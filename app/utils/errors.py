"""Domain errors raised by the services layer"""


class NotFoundError(LookupError):
    """A requested record does not exist"""

    entity = "Record"

    def __init__(self, identifier):
        self.identifier = identifier
        super().__init__(f"{self.entity} {identifier} not found")


class CompetitionNotFoundError(NotFoundError):
    entity = "Competition"


class GameNotFoundError(NotFoundError):
    entity = "Game"


class UserNotFoundError(NotFoundError):
    entity = "User"


class BetNotFoundError(NotFoundError):
    entity = "Bet"
