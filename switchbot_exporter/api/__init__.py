"""HTTP endpoint blueprints."""
