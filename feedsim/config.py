
import os

def _f(key: str, default: float) -> float:
    try: return float(os.getenv(key, str(default)))
    except Exception: return float(default)

def _i(key: str, default: int) -> int:
    try: return int(float(os.getenv(key, str(default))))
    except Exception: return int(default)

def _csv(key: str, default: str) -> list[str]:
    return [s.strip() for s in os.getenv(key, default).split(",") if s.strip()]

# Reference data the generators draw from
INSTRUMENTS = _csv("INSTRUMENTS", "MSFT,AAPL,IBM,BHP,JPM,BAML")
TRADERS = _csv("TRADERS", "Bob,Alice,Geoff,Gertrude")
BOOKS = _csv("BOOKS", "A,B,C,D")

# Trade generation
TRADE_ID_PREFIX = os.getenv("TRADE_ID_PREFIX", "TradeID_")
TRADE_ID_WIDTH = _i("TRADE_ID_WIDTH", 4)
TRADE_MAX_QTY = _i("TRADE_MAX_QTY", 100)
TRADE_MAX_PRICE = _i("TRADE_MAX_PRICE", 10)

# Market random walk: delta ~ U[-MARKET_MAX_MOVE, MARKET_MAX_MOVE)
MARKET_MAX_MOVE = _f("MARKET_MAX_MOVE", 5.0)

# Timers
TRADE_INTERVAL_SEC = _f("TRADE_INTERVAL_SEC", 2.0)
MARKET_INTERVAL_SEC = _f("MARKET_INTERVAL_SEC", 4.0)

# Optional seed for reproducible runs; unset -> system randomness
SIM_SEED = os.getenv("SIM_SEED") or None

# --- Sinks (plotting data sources) ---
SINK_ROLLOVER = _i("SINK_ROLLOVER", 100)
SINK_NAME = os.getenv("SINK_NAME", "trades_plot")
SINK_COLUMNS = _csv("SINK_COLUMNS", "quantity,price")
WS_QUEUE_MAX = _i("WS_QUEUE_MAX", 1000)

# --- Boot ---
BOOT_FAILFAST = os.getenv("BOOT_FAILFAST", "0").lower() in ("1", "true", "yes")
STEP_TIMEOUT_SEC = _f("STEP_TIMEOUT_SEC", 5.0)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
