"""
Simulation tuning knobs.
"""

import math

# Debug: extra consistency checks inside network mutators
DEBUG = True

# Population controls
POPULATION_SIZE = 40
SEED = 1
CHILDREN_FRACTION = 0.1      # children of the best member, as a fraction of the population
CHILDREN_DECAY = 0.8         # children *= decay per rank
MAX_COHERENCE = 0.97         # coherence of the best member's offspring
PARENT_FITNESS_WEIGHT = 0.75 # avg_fitness = w * mean(parents) + (1 - w) * fitness
MUTATION_ATTEMPTS = 5
GENERATIONS = 30

# Mutation: per-network structure
P_ADD_NEURON = 0.3
P_WEIGHT = 0.4
WEIGHT_COHERENCE = 0.7
P_INTERNAL_STRUCTURE = 0.3
INTERNAL_OUTCOMES = (0.35, 0.35, 0.3)             # rewire source, rewire destination, delete
NEW_CONNECTION_P_ZERO = 0.6
NEW_CONNECTION_MAX = 3

# Mutation: inter-network connections
P_INTER_STRUCTURE = 0.25
INTER_OUTCOMES = (0.25, 0.15, 0.25, 0.15, 0.2)    # src in place, src adjacent, dst in place, dst adjacent, delete
NEW_INTER_CONNECTION_P_ZERO = 0.7
NEW_INTER_CONNECTION_MAX = 2

# Mutation: joint geometry
P_JOINT = 0.2
JOINT_COHERENCE = 0.8
P_FACE = 0.05

# Neuron chooser: (group, weight, functions); the first group must hold only unary functions
NEURON_GROUPS = (
    ("unary", 0.35, ("ABS", "ATAN", "SIN", "COS", "EXP", "LOG", "SIGMOID", "SIGN")),
    ("history", 0.15, ("DIFFERENTIATE", "INTEGRATE", "MEMORY", "SMOOTH")),
    ("oscillator", 0.15, ("SAW", "WAVE")),
    ("reduce", 0.2, ("MIN", "MAX", "SUM", "PRODUCT")),
    ("binary", 0.05, ("DIVISION",)),
    ("ternary", 0.1, ("GTE", "IF", "INTERPOLATE", "IFSUM")),
)
CHOOSER_ATTEMPTS = 10

# Explicit network engine
FORCE_FACTOR = 50.0
HINGE_SENSOR_SCALE = 1.0 / 180.0   # degrees -> [-1, 1]
MEMORY_SIZE = 30
SMOOTH_KERNEL = (1.0, 0.875, 0.75, 0.625, 0.5, 0.375, 0.25, 0.125)
DIVISION_LIMIT = 0.01
VALUE_LIMIT = 1e6                  # operator outputs are clamped to +-VALUE_LIMIT

# Simulation pacing
PHYSICS_DT = 0.02
NN_STEPS_PER_PHYSICS_STEP = 2
SETTLE_TICKS = 20
INITIALIZATION_TIME = 1.0
EVALUATION_TIME = 8.0
MAX_WORKERS = 4
FITNESS = "WALKING"

# Toy physics
HINGE_MOTOR_GAIN = 4.0
HINGE_DRAG = 0.9
POWER_STROKE = 1.0
RECOVERY_STROKE = 0.35
THRUST_SCALE = 0.5
BODY_DRAG = 0.95
DEFAULT_HINGE_LIMIT = math.pi / 2 * 0.8

# Logging
LOG_LEVEL = "INFO"
LOG_DIR = None

# Viewer
SHOW_VIEWER = True
SCREEN_W, SCREEN_H = 980, 720
VIEW_SECONDS = 6.0
