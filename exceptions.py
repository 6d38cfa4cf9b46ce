class CreatureError(Exception):
    """Base for all virtual creature exceptions."""

    pass


class StructuralInvariantError(CreatureError):
    """A network, joint or morphology would violate its invariants."""

    pass


class MembershipError(CreatureError, KeyError):
    """A neural was queried on a network it does not belong to."""

    pass


class UnsupportedJointError(CreatureError, NotImplementedError):
    """The engine has no read path for this joint type."""

    pass


class EvolutionError(CreatureError):
    """Misuse of the population loop."""

    pass


class RepairExhaustedError(CreatureError):
    """The repair stage could not bring every neuron to its minimal fan-in."""

    def __init__(self, limitations):
        self.limitations = list(limitations)
        super().__init__(
            f"{len(self.limitations)} neuron(s) left below their minimal connection count"
        )
