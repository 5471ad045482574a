"""
JAX Configuration - MUST be imported before any JAX imports.

This module sets environment variables for JAX configuration:
- Quiet XLA/TensorFlow C++ logging
- Persistent compilation cache for the small jitted density helpers
- CPU by default; the engine steps one small vector at a time, so device
  transfers would dominate on an accelerator
"""
import os
from pathlib import Path

# --- LOGGING ---
os.environ.setdefault("TF_CPP_MIN_LOG_LEVEL", "2")

# --- PLATFORM ---
os.environ.setdefault("JAX_PLATFORMS", "cpu")

# --- PERSISTENT COMPILATION CACHE ---
_JAX_CACHE_DIR = Path.home() / ".cache" / "jax" / "stepmcmc_cache"
_JAX_CACHE_DIR.mkdir(parents=True, exist_ok=True)
os.environ.setdefault("JAX_COMPILATION_CACHE_DIR", str(_JAX_CACHE_DIR))
os.environ.setdefault("JAX_PERSISTENT_CACHE_MIN_COMPILE_TIME_SECS", "1.0")
