"""
Example 02: Condition Queries and Raw SQL

Builds a grouped, aggregate-filtered query through the repository, then runs a
hand-written report with execute_raw_query.
"""

from dataclasses import dataclass

from row_orm import (
    AggregateFunction,
    ConnectionConfig,
    Engine,
    Repository,
    SQLSanitizer,
    StorageError,
    column,
    entity,
    execute_raw_query,
)


@entity(table="Orders")
@dataclass
class Order:
    """Order entity"""
    id: int = column(primary_key=True)
    customer: str = ""
    amount: float = 0.0


def main():
    engine = Engine.from_config(ConnectionConfig(driver="sqlite", database=":memory:"))
    engine.execute('CREATE TABLE "Orders" (id INTEGER PRIMARY KEY, customer TEXT, amount REAL)')

    orders = Repository(Order, engine)
    for order in [
        Order(id=1, customer="alice", amount=30.0),
        Order(id=2, customer="alice", amount=45.5),
        Order(id=3, customer="bob", amount=12.0),
    ]:
        orders.save(order)

    print("=== Condition Queries ===\n")

    print("1. Orders for alice:")
    for order in orders.find_by(customer="alice"):
        print(f"   - #{order.id}: {order.amount}")
    print()

    print("2. Orders grouped by id with SUM(amount) > 20:")
    builder = (
        orders.find_with_conditions()
        .group_by("id")
        .having(AggregateFunction.SUM, ["amount"], ">", 20)
    )
    sql, params = builder.build()
    print(f"   SQL: {sql}")
    print(f"   Params: {params}")
    for order in builder.execute():
        print(f"   - #{order.id}: {order.customer}")
    print()

    print("=== Raw SQL ===\n")

    print("3. Totals per customer:")
    rows = execute_raw_query(
        "SELECT customer, SUM(amount) AS total FROM Orders GROUP BY customer ORDER BY customer",
        engine=engine,
        sanitizer=SQLSanitizer(allowed_verbs=frozenset({"SELECT"})),
    )
    for row in rows:
        print(f"   {row['customer']}: {row['total']}")
    print()

    print("4. Query a missing table:")
    try:
        execute_raw_query("SELECT * FROM invoices", engine=engine)
    except StorageError as e:
        print(f"   StorageError: {e}\n")

    engine.close()


if __name__ == "__main__":
    main()
