# Utils package for Pazar backend
