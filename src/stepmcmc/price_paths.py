"""
Monte Carlo Price Paths - Geometric Brownian Motion horizon analysis.

Simulates price paths under GBM and summarizes the terminal distribution at
several investment horizons:

    S_T = S_0 * exp((mu - 0.5 * sigma^2) * T + sigma * sqrt(T) * Z),  Z ~ N(0, 1)

Terminal prices are drawn directly from the closed form above, so memory is
O(num_paths) regardless of horizon. A small number of full daily paths
(``keep_paths``) are simulated step by step for plotting.

Per-horizon summary (HorizonSummary):
    expected_price / expected_return: mean terminal price and simple return
    volatility: standard deviation of simple returns over the horizon
    var_95 / var_99: 5th / 1st percentile simple return (negative = loss)
    prob_loss: fraction of paths ending below S_0
    sharpe_ratio: (expected_return - r_f * T) / volatility
"""

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

import numpy as np
import jax
import jax.numpy as jnp
import jax.random as random

import logging
logger = logging.getLogger('stepmcmc')

TRADING_DAYS_PER_YEAR = 252
DEFAULT_HORIZONS = (1, 5, 10, 20)
DEFAULT_NUM_PATHS = 5000
DEFAULT_RISK_FREE_RATE = 0.03


@dataclass(frozen=True)
class HorizonSummary:
    """Terminal distribution statistics for one horizon."""
    years: float
    expected_price: float
    expected_return: float
    volatility: float
    var_95: float
    var_99: float
    prob_loss: float
    sharpe_ratio: float
    num_paths: int
    sample_path: Optional[np.ndarray] = None


def estimate_gbm_parameters(change_percent: float) -> Tuple[float, float]:
    """
    Heuristic annual drift and volatility from a recent percentage price change.

    Positive moves map to a drift in [5%, 15%], negative moves to a drift of at
    least 2%; volatility grows with the size of the move within [15%, 45%].

    Returns:
        (drift, volatility)
    """
    move = abs(change_percent) / 100
    if change_percent > 0:
        drift = max(0.05, min(0.15, change_percent / 100 * 12))
    else:
        drift = max(0.02, 0.08 - move * 2)
    volatility = max(0.15, min(0.45, 0.25 + move * 2))
    return drift, volatility


@jax.jit
def _terminal_prices(key, initial_price, drift, volatility, horizon_years, shape_ref):
    z = random.normal(key, shape_ref.shape)
    log_growth = (drift - 0.5 * volatility ** 2) * horizon_years + volatility * jnp.sqrt(horizon_years) * z
    return initial_price * jnp.exp(log_growth)


def _daily_paths(key, initial_price, drift, volatility, horizon_years, num_paths):
    steps = max(1, int(TRADING_DAYS_PER_YEAR * horizon_years))
    dt = horizon_years / steps
    z = random.normal(key, (num_paths, steps))
    increments = (drift - 0.5 * volatility ** 2) * dt + volatility * jnp.sqrt(dt) * z
    log_paths = jnp.concatenate([jnp.zeros((num_paths, 1)), jnp.cumsum(increments, axis=1)], axis=1)
    return initial_price * jnp.exp(log_paths)


def simulate_price_paths(key, initial_price: float, drift: float, volatility: float,
                         horizon_years: float, num_paths: int = DEFAULT_NUM_PATHS,
                         keep_paths: int = 0):
    """
    Simulate GBM terminal prices, plus optional daily sample paths.

    Args:
        key: JAX random key
        initial_price: S_0 (> 0)
        drift: Annual drift mu
        volatility: Annual volatility sigma (>= 0)
        horizon_years: Horizon T in years (> 0)
        num_paths: Number of terminal prices to draw
        keep_paths: Number of full daily paths to simulate (0 for none)

    Returns:
        terminal: np.ndarray (num_paths,)
        paths: np.ndarray (keep_paths, steps + 1) or None
    """
    errors = []
    if initial_price <= 0:
        errors.append(f"initial_price must be > 0, got {initial_price}")
    if volatility < 0:
        errors.append(f"volatility must be >= 0, got {volatility}")
    if horizon_years <= 0:
        errors.append(f"horizon_years must be > 0, got {horizon_years}")
    if num_paths < 1:
        errors.append(f"num_paths must be >= 1, got {num_paths}")
    if keep_paths < 0:
        errors.append(f"keep_paths must be >= 0, got {keep_paths}")
    if errors:
        raise ValueError("Invalid price path parameters:\n  " + "\n  ".join(errors))

    terminal_key, path_key = random.split(key)
    terminal = _terminal_prices(
        terminal_key,
        float(initial_price), float(drift), float(volatility), float(horizon_years),
        jnp.zeros(num_paths),
    )

    paths = None
    if keep_paths:
        paths = np.asarray(_daily_paths(path_key, initial_price, drift, volatility,
                                        horizon_years, keep_paths))
    return np.asarray(terminal, dtype=float), paths


def summarize_horizon(terminal: np.ndarray, initial_price: float, horizon_years: float,
                      risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
                      sample_path: Optional[np.ndarray] = None) -> HorizonSummary:
    """Summarize a terminal price distribution; see module docstring for definitions."""
    terminal = np.asarray(terminal, dtype=float)
    if terminal.ndim != 1 or terminal.size == 0:
        raise ValueError("terminal must be a non-empty 1-D array of prices")

    returns = (terminal - initial_price) / initial_price
    expected_return = float(returns.mean())
    volatility = float(returns.std())

    if volatility > 0:
        sharpe = (expected_return - risk_free_rate * horizon_years) / volatility
    else:
        sharpe = 0.0

    return HorizonSummary(
        years=horizon_years,
        expected_price=float(terminal.mean()),
        expected_return=expected_return,
        volatility=volatility,
        var_95=float(np.percentile(returns, 5)),
        var_99=float(np.percentile(returns, 1)),
        prob_loss=float(np.mean(terminal < initial_price)),
        sharpe_ratio=float(sharpe),
        num_paths=int(terminal.size),
        sample_path=sample_path,
    )


def run_horizon_analysis(initial_price: float, drift: float, volatility: float,
                         horizons: Sequence[float] = DEFAULT_HORIZONS,
                         num_paths: int = DEFAULT_NUM_PATHS,
                         risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
                         rng_seed: int = 42,
                         keep_paths: int = 1) -> Dict[float, HorizonSummary]:
    """
    Simulate and summarize each horizon with an independent key.

    Returns:
        Dict mapping horizon (years) to HorizonSummary, in ``horizons`` order
    """
    base_key = random.PRNGKey(rng_seed)
    results = {}
    for i, years in enumerate(horizons):
        key = random.fold_in(base_key, i)
        terminal, paths = simulate_price_paths(key, initial_price, drift, volatility, years,
                                               num_paths=num_paths, keep_paths=keep_paths)
        sample = paths[0] if paths is not None else None
        summary = summarize_horizon(terminal, initial_price, years, risk_free_rate, sample)
        results[years] = summary
        logger.info(
            f"Horizon {years}y: E[S]={summary.expected_price:.2f} "
            f"E[r]={summary.expected_return * 100:.1f}% VaR95={summary.var_95 * 100:.1f}% "
            f"P(loss)={summary.prob_loss * 100:.1f}%"
        )
    return results
