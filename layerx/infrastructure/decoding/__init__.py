"""Response handling: status classification, error messages, envelope decoding."""
