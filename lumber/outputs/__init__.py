"""Destinations for canonical events: stdout, files, webhooks, fan-out and async wrappers."""