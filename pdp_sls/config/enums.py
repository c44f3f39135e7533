# Indices / enums used across modules (keep ints for JIT friendliness)

# action kinds; an action is encoded as 2 * task_id + kind
ACT_PICKUP   = 0
ACT_DELIVERY = 1
NO_ACTION    = -1 # "none" in first_action / after_pickup / after_delivery

UNASSIGNED   = -1 # vehicle[task] while the task is not carried by anyone

# objective modes
MODE_VEHICLE_DEPENDENT = 0 # real per-vehicle travel cost
MODE_OPPONENT          = 1 # lower bound used to model an opponent fleet

# constructive heuristics (ids match the agent configuration files)
INIT_LARGEST_CAPACITY = 1 # largest capacity vehicle, heaviest tasks first
INIT_CLOSEST_VEHICLE  = 2 # vehicle whose home is closest to the pickup city
INIT_CHEAPEST_COST    = 3 # cheapest cost per km vehicle, lightest tasks first
INIT_IDS = (INIT_LARGEST_CAPACITY, INIT_CLOSEST_VEHICLE, INIT_CHEAPEST_COST)

# plan step kinds
STEP_MOVE    = "move"
STEP_PICKUP  = "pickup"
STEP_DELIVER = "deliver"
