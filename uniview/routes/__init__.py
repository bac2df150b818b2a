from uniview.routes import auth, health, lots, ws

ROUTERS = (health.router, auth.router, lots.router, ws.router)
