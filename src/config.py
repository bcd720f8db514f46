from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]

OUTPUTS_DIR = PROJECT_ROOT / "outputs"
FIGURES_DIR = OUTPUTS_DIR / "figures"
TABLES_DIR = OUTPUTS_DIR / "tables"
LOGS_DIR = OUTPUTS_DIR / "logs"

RANDOM_SEED = 2026

# Packages recorded in every run metadata file.
TRACKED_PACKAGES = ["numpy", "pandas", "scipy", "matplotlib", "scikit-learn", "statsmodels", "joblib"]

# Lecture 1 — language basics
PEOPLE_N = 200
PEOPLE_CITIES = ["Berlin", "Lagos", "Lima", "Osaka", "Toronto"]
BENCHMARK_VECTOR_LEN = 10_000
BENCHMARK_REPEAT = 7
BENCHMARK_NUMBER = 50

# Lecture 2 — interop + ML
REGRESSION_N = 300
REGRESSION_INTERCEPT = 1.5
REGRESSION_SLOPE = -2.0
REGRESSION_NOISE = 0.5

GD_LEARNING_RATE = 0.05
GD_N_ITER = 2000
GD_TOL = 1e-10

DIGITS_TEST_SIZE = 0.25
MLP_HIDDEN_LAYER_SIZES = (64, 32)
MLP_MAX_ITER = 300
CONV_POOL_SIZE = 2

# Lecture 3 — differential equations
LOTKA_VOLTERRA_PARAMS = {"alpha": 1.5, "beta": 1.0, "gamma": 3.0, "delta": 1.0}
LOTKA_VOLTERRA_U0 = (1.0, 1.0)
LOTKA_VOLTERRA_TSPAN = (0.0, 10.0)

LORENZ_PARAMS = {"sigma": 10.0, "rho": 28.0, "beta": 8.0 / 3.0}
LORENZ_U0 = (1.0, 0.0, 0.0)
LORENZ_TSPAN = (0.0, 100.0)

ODE_N_POINTS = 1000

# SIR jump process: infection propensity beta*S*I, recovery gamma*I.
SIR_BETA = 0.1 / 1000
SIR_GAMMA = 0.01
SIR_U0 = (999, 1, 0)
SIR_T_MAX = 250.0
SIR_ENSEMBLE_RUNS = 20

# Lecture 3 — probabilistic programming
COIN_FLIP_N = 100
COIN_FLIP_TRUE_P = 0.5
COIN_PRIOR = (1.0, 1.0)
MCMC_N_SAMPLES = 2000
MCMC_N_WARMUP = 500
MCMC_N_CHAINS = 4
MH_STEP_SIZE = 0.5
HMC_STEP_SIZE = 0.05
HMC_N_LEAPFROG = 10
COIN_HMC_N_LEAPFROG = 5
CREDIBLE_ALPHA = 0.05

# Lecture 3 — distributed Monte-Carlo pi
PI_N = 10_000_000
PI_N_WORKERS = 4
