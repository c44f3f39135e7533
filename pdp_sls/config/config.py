# Simple parameter defaults (extend freely)
DEFAULTS = {
    "seed": 0,
    "p": 0.5,                    # probability of picking the best neighbour
    "initial_solution_id": 1,    # 1 largest capacity, 2 closest vehicle, 3 cheapest cost
    "timeout_plan_ms": 5000,
    "timeout_bid_ms": 2000,
    "plan_margin_ms": 500,       # stop this long before the plan timeout
    "bid_margin_ms": 250,        # stop this long before each half of the bid timeout
    "max_iters": None,           # optional hard cap on SLS iterations
    "log_period": 100,
}

# Defaults used by the auction planner (more greedy than the centralized run)
AUCTION_DEFAULTS = dict(DEFAULTS, p=0.9)
