# Vulture whitelist: names only referenced through decorators or callback
# signatures, which vulture reports as unused.
#
# Run vulture with: poetry run vulture switchbot_exporter/ vulture_whitelist.py --min-confidence 80

# Signal handler signature (signum, frame)
frame  # unused variable

# Flask view functions and error handlers are registered by decorator
handle_switchbot_api_error  # unused function
handle_invalid_operation  # unused function
healthz  # unused function
readyz  # unused function
handle_method_not_allowed  # unused function
