"""Background scheduling via cron."""
