"""Menu-aware ordering and recommendation core for branch WhatsApp bots."""
