import duckdb
import pyarrow as pa
import pyarrow.parquet as pq
import os

def create_sample_package():
    """
    Creates a DuckDB base database with a Property table and a Parquet
    change log in the layout produced by `transform-diff --export`.
    """
    here = os.path.dirname(__file__)
    db_path = os.path.join(here, "product.duckdb")
    log_path = os.path.join(here, "custom.parquet")

    # Delete existing files if they exist
    for path in (db_path, log_path):
        if os.path.exists(path):
            os.remove(path)

    con = duckdb.connect(db_path)

    properties = pa.table({
        "Property": ["ProductName", "ProductVersion", "ALLUSERS", "REBOOT", "ARPNOMODIFY"],
        "Value": ["Contoso Agent", "4.2.0", "1", "Force", "1"],
    })
    con.execute('CREATE TABLE "Property" AS SELECT * FROM properties')

    print(f"Database 'product.duckdb' created successfully in the 'examples' directory.")
    print(con.execute('SELECT * FROM "Property"').fetch_arrow_table())
    con.close()

    # A transform that adds a server URL, suppresses reboots and drops ARPNOMODIFY
    change_log = pa.table({
        "Table": ["Property", "Property", "Property", "Property", "Property"],
        "Column": ["INSERT", "Value", "Value", "DELETE", "INSERT"],
        "Row": ["SERVERURL", "SERVERURL", "REBOOT", "ARPNOMODIFY", "TENANTID"],
        "Data": [None, "https://agent.contoso.example", "ReallySuppress", None, None],
    })
    pq.write_table(change_log, log_path)

    print(f"\nChange log 'custom.parquet' written with {change_log.num_rows} rows.")

if __name__ == "__main__":
    create_sample_package()
