def print_init(name, adapter_params):
    print(f"Adapter {name} initialized with {adapter_params}.")


def print_extract(name, load_params, shape):
    print(f"Extract {name} done with {load_params}. DataFrame shape: {shape}")


def print_load(name, upserted, table_name):
    print(f"Load {name} done - {upserted} rows upserted in {table_name}.")
