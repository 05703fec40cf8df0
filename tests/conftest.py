pytest_plugins = ["restlayer.testing.pytest"]
