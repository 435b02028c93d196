import pytest

from vizstore import Cell, Dashboard, NotFoundError, ValidationError


@pytest.mark.asyncio
async def test_update_replaces_cells(stores, ctx):
    created = await stores.dashboards.add(
        ctx, Dashboard(cells=[Cell(x=0, y=0, w=4, h=2, queries=["q1"])])
    )
    assert created.id is not None
    assert created.cells == [Cell(x=0, y=0, w=4, h=2, queries=["q1"])]

    created.cells = [
        Cell(x=0, y=2, w=6, h=3, queries=["q2"]),
        Cell(x=6, y=2, w=6, h=3, queries=["q3", "q4"]),
    ]
    await stores.dashboards.update(ctx, created)

    got = await stores.dashboards.get(ctx, created.id)
    assert got.cells == [
        Cell(x=0, y=2, w=6, h=3, queries=["q2"]),
        Cell(x=6, y=2, w=6, h=3, queries=["q3", "q4"]),
    ]


@pytest.mark.asyncio
async def test_cells_may_overlap_and_be_negative(stores, ctx):
    cells = [
        Cell(x=-5, y=-5, w=0, h=0),
        Cell(x=-5, y=-5, w=2**31 - 1, h=-(2**31)),
    ]
    created = await stores.dashboards.add(ctx, Dashboard(cells=cells))
    assert (await stores.dashboards.get(ctx, created.id)).cells == cells


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "cell",
    [
        Cell(x=2**31, y=0, w=1, h=1),
        Cell(x=0, y=-(2**31) - 1, w=1, h=1),
        Cell(x=0, y=0, w=1.5, h=1),
        Cell(x=0, y=0, w=1, h=True),
        Cell(x=0, y=0, w=1, h=1, queries=[{"q": 1}]),
    ],
)
async def test_invalid_cells(stores, ctx, cell):
    with pytest.raises(ValidationError):
        await stores.dashboards.add(ctx, Dashboard(cells=[cell]))


@pytest.mark.asyncio
async def test_returned_dashboards_are_copies(stores, ctx):
    created = await stores.dashboards.add(
        ctx, Dashboard(cells=[Cell(x=0, y=0, w=1, h=1, queries=["q1"])])
    )
    created.cells[0].queries.append("changed")

    got = await stores.dashboards.get(ctx, created.id)
    assert got.cells[0].queries == ["q1"]


@pytest.mark.asyncio
async def test_delete_and_missing_dashboards(stores, ctx):
    created = await stores.dashboards.add(ctx, Dashboard())
    await stores.dashboards.delete(ctx, created)

    with pytest.raises(NotFoundError):
        await stores.dashboards.get(ctx, created.id)
    with pytest.raises(NotFoundError):
        await stores.dashboards.delete(ctx, created)
    with pytest.raises(NotFoundError):
        await stores.dashboards.update(ctx, created)


@pytest.mark.asyncio
async def test_update_missing_dashboard_changes_nothing(stores, ctx):
    kept = await stores.dashboards.add(
        ctx, Dashboard(cells=[Cell(x=1, y=1, w=1, h=1)])
    )
    ghost = Dashboard(cells=[])
    ghost.id = kept.id + 1

    with pytest.raises(NotFoundError):
        await stores.dashboards.update(ctx, ghost)
    assert (await stores.dashboards.get(ctx, kept.id)).cells == kept.cells
