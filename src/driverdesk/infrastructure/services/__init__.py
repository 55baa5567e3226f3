"""Infrastructure services: email delivery and token generation."""
