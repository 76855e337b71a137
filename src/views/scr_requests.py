from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, DataTable, Input, Label, Select

import db.crud as crud
from utils.pure import format_items, parse_items
from views.base_screen import LiveScreen

REQUEST_TYPES = ("Equipment", "Office Supplies", "Resources")


class RequestsScreen(LiveScreen):
    """
    Supply requests. Users see and create their own; admins see everyone's.
    """

    TITLE_TEXT = "Requests"
    VIEW_ID = "requests-page"
    KINDS = frozenset({"requests"})

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield DataTable(id="table-requests")
            yield Label("New request")
            with Horizontal(id="hort-req-form"):
                yield Select(
                    [(t, t) for t in REQUEST_TYPES],
                    value=REQUEST_TYPES[0],
                    allow_blank=False,
                    id="select-type",
                )
                yield Input(placeholder="Items, e.g. Pens: 3, Paper: 2", id="input-items")
                yield Button("Submit", id="btn-submit", variant="primary")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Date", "Type", "Items", "Status", "Employee")

    def reload(self) -> None:
        table = self.query_one(DataTable)
        table.clear()
        for r in crud.list_requests(self.app.state):
            table.add_row(
                r.date.replace("T", " "),
                r.type,
                format_items(r.items),
                r.status,
                r.employee_email,
                key=str(r.id),
            )

    @on(Button.Pressed, "#btn-submit")
    @work(exclusive=True)
    async def handle_submit(self) -> None:
        items_input = self.query_one("#input-items", Input)
        req = await self.mutate(
            crud.create_request(
                self.app.state,
                self.query_one("#select-type", Select).value,
                parse_items(items_input.value),
            ),
            "Request submitted.",
            self.KINDS,
        )
        if req:
            items_input.value = ""
