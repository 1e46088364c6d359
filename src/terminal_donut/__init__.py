"""Terminal donut: ASCII sphere tracing of signed distance fields."""
