pytest_plugins = ['test.utils.fixtures']
