"""
Sample module graph shared by the end-to-end and CLI tests.

    AppModule (prefix /api, on_request hook, TimingMacro, "app.name" value)
    ├── UsersModule (guarded by require_token)
    │   └── AuthModule
    └── ChatModule (WebSocket)
        └── AuthModule   <- diamond
"""

from typing import Annotated, Dict, List

from plinth import (
    ALL,
    Body,
    GET,
    Guard,
    Hooks,
    Inject,
    POST,
    Path,
    Q,
    Set,
    ValueProvider,
    WsHandlers,
    controller,
    detail,
    macro,
    macro_handler,
    module,
    schema,
    service,
    ws,
    ws_controller,
    ws_schema,
)


REQUEST_LOG: List[str] = []


def log_request(ctx):
    REQUEST_LOG.append(ctx.path)


def require_token(ctx):
    if ctx.headers.get("authorization") != "Bearer secret":
        ctx.set.status = 401
        return {"error": "unauthorized"}
    return None


# ============================================================================
# Auth
# ============================================================================

@service()
class AuthService:

    def login(self, username: str) -> str:
        return f"token-{username}"


@controller("/auth")
class AuthController:

    def __init__(self, auth: Annotated[AuthService, Inject()]):
        self.auth = auth

    @POST("/login")
    def login(self, body=Body(), set=Set()):
        set.status = 201
        return {"token": self.auth.login(body["username"])}


@module(name="auth", services=[AuthService], controllers=[AuthController])
class AuthModule:
    pass


# ============================================================================
# Users
# ============================================================================

@service()
class UserRepo:

    def __init__(self):
        self.rows: Dict[str, dict] = {"1": {"id": "1", "name": "ada"}}

    def get(self, user_id: str):
        return self.rows.get(user_id)

    def add(self, name: str) -> dict:
        row = {"id": str(len(self.rows) + 1), "name": name}
        self.rows[row["id"]] = row
        return row


@service([UserRepo])
class UsersService:

    def __init__(self, repo):
        self.repo = repo

    def find(self, user_id: str):
        return self.repo.get(user_id)

    def search(self, name: str) -> List[dict]:
        return [row for row in self.repo.rows.values() if name in row["name"]]


@controller("/users")
class UsersController:

    def __init__(self, users=Inject(UsersService)):
        self.users = users

    @GET("/search")
    def search(self, name=Q("name")):
        return self.users.search(name or "")

    @GET("/:id")
    def get_one(self, user_id=Path("id"), set=Set()):
        user = self.users.find(user_id)
        if user is None:
            set.status = 404
            return {"error": "not found"}
        return user

    @schema(body={"name": "string"})
    @detail(tags=["Users"])
    @POST("")
    async def create(self, body=Body(), set=Set()):
        set.status = 201
        return self.users.repo.add(body["name"])

    @ALL("/echo")
    def echo(self, ctx):
        return ctx.method


@module(
    name="users",
    imports=[AuthModule],
    services=[UserRepo, UsersService],
    controllers=[UsersController],
    guard=Guard(before_handle=require_token),
)
class UsersModule:
    pass


# ============================================================================
# Chat
# ============================================================================

@service()
class ChatService:

    def __init__(self):
        self.members: List[object] = []
        self.messages: List[str] = []

    def join(self, ws):
        self.members.append(ws)

    def post(self, text: str):
        self.messages.append(text)


@ws_controller("/chat")
class ChatSocket:

    def __init__(self, chat: Annotated[ChatService, Inject()]):
        self.chat = chat

    @ws_schema(body={"text": "string"})
    @ws("/room")
    def room(self):
        return WsHandlers(open=ChatSocket.on_open, message=self.on_message)

    def on_open(self, ws):
        self.chat.join(ws)

    def on_message(self, ws, message):
        self.chat.post(message)


@module(name="chat", imports=[AuthModule], services=[ChatService], ws_controllers=[ChatSocket])
class ChatModule:
    pass


# ============================================================================
# App
# ============================================================================

@macro("timing")
class TimingMacro:

    @macro_handler("timed")
    def timed(self, enabled):
        return {"after_handle": log_request} if enabled else {}


@module(
    name="app",
    prefix="/api",
    imports=[UsersModule, ChatModule],
    macros=[TimingMacro],
    providers=[ValueProvider("app.name", "demo")],
    hooks=Hooks(on_request=log_request),
)
class AppModule:
    pass
