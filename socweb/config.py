"""
Run configuration
=================
One object with grouped plain attributes. Every component reads it through
the simulation state; nothing changes it once a run has started.
"""

from .errors import ConfigError


class Config:
    # Run length and seeding
    total_timesteps = 1000         # niter: MC timesteps per realization
    random_seed = 42
    realizations = 1               # realization r is seeded with random_seed + r

    # Periodic phases (in MC timesteps)
    migration_interval = 10        # tm
    network_interval = 100         # tcn: coexistence network export
    show_each = 10                 # per-species totals + population rows
    save_each = 100                # time series rewrite

    # Trial budget per site: floor(trials_per_log_population * ln(sumOld))
    trials_per_log_population = 10.0

    # Feeding. Two call sites use different attempt counts: the main trial
    # loop and predation on arrival in a full target site.
    feeding_attempts = 5
    arrival_feeding_attempts = 1
    predation_on_arrival = False

    # Migration: migrants = floor(remaining * density * migration_fraction)
    migration_fraction = 1.0

    # Input / output
    food_web_file = None
    neighborhood_file = None
    output_dir = "output_socweb"

    _POSITIVE_INTS = (
        "total_timesteps", "realizations", "migration_interval",
        "network_interval", "show_each", "save_each",
    )

    def __init__(self, **overrides):
        for key, value in overrides.items():
            if key.startswith("_") or not hasattr(Config, key):
                raise ConfigError(f"unknown config option {key!r}")
            setattr(self, key, value)

    def validate(self):
        for name in self._POSITIVE_INTS:
            value = getattr(self, name)
            if not isinstance(value, int) or value <= 0:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")
        if self.feeding_attempts < 0 or self.arrival_feeding_attempts < 0:
            raise ConfigError("feeding attempts cannot be negative")
        if self.trials_per_log_population < 0:
            raise ConfigError("trials_per_log_population cannot be negative")
        if not 0.0 <= self.migration_fraction <= 1.0:
            raise ConfigError("migration_fraction must lie in [0, 1]")
        return self

    def as_dict(self):
        keys = [k for k in dir(Config) if not k.startswith("_")
                and not callable(getattr(Config, k))]
        return {k: getattr(self, k) for k in keys}
