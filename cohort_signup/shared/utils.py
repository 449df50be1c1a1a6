import yaml

try:
    from yaml import CSafeLoader as Loader
except ImportError:
    from yaml import SafeLoader as Loader


def load_yaml(data):
    """Loads an operator YAML data file. Not imported by the Lambda handlers."""
    with open(data) as f:
        return yaml.load(f, Loader=Loader) or {}
